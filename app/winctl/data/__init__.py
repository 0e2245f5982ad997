"""Bundled data files for winctl."""
