"""Operational utilities (logging)."""
