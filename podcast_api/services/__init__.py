"""Business logic services.

This package contains service classes that implement business logic,
orchestrate operations across repositories, and return result envelopes
to the API routers.
"""
