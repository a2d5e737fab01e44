"""Loader options and persisted settings."""
