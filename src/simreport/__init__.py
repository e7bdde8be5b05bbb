"""PDF summary reports for molecular simulation experiments."""

__version__ = "0.3.0"
