"""Helpers shared across apps: money formatting, public tokens, object storage."""
