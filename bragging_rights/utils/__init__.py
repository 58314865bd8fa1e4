"""
Utilities
=========

Logging setup and the exception hierarchy.
"""
