"""Shared libraries: configuration, catalog, errors and logging."""
