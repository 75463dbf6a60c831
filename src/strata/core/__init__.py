"""Shared errors and constants."""
