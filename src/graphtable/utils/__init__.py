"""Utility helpers shared across graphtable."""
