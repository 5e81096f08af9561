"""Bundled data files for keypurge."""
