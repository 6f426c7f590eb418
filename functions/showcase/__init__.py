"""
Backend package for the project showcase API.

This package provides a FastAPI application over profile and project stores,
with Firebase ID tokens identifying callers.
"""
