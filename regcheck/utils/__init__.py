"""Utility modules for regcheck.

This package contains the reference-data providers used by the country and
language checks, and the on-disk cache that keeps their dataset between
calls.
"""
