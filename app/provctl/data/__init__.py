"""Bundled data files for provctl."""
