"""
Web application for the Chilean Spanish usage dictionary.

This package contains the FastAPI application serving both access modes:
- Public pages and JSON API over published entries
- Editor mode (subdomain or /editor prefix) with authenticated editorial workflow
"""

__all__ = []
