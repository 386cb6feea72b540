"""Meteorological file resolution for HYSPLIT jobs."""

from hyjob.met.resolver import resolve_met_file, resolve_met_files

__all__ = ["resolve_met_file", "resolve_met_files"]
