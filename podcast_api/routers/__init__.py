"""API routers.

``users`` covers account registration, login and profiles; ``podcasts``
covers the catalog and its nested episodes.
"""
