"""
Shared helpers for the catalog application.
"""
