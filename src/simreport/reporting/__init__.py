"""Report assembly and rendering."""
