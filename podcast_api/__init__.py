"""FastAPI service for podcasts, episodes and user accounts.

This package provides REST API endpoints for browsing and managing a
podcast catalog and for registering and authenticating users.
"""

__version__ = "1.0.0"
