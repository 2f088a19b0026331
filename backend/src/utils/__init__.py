"""
Utility modules for the agenda backend.

This package contains shared utility functions and helpers used across
the application, including datetime utilities and database query helpers.
"""
