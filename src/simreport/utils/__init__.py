"""Utility functions for simreport package."""

from simreport.utils.parallel import parallel_map, resolve_n_jobs

__all__ = ["parallel_map", "resolve_n_jobs"]
