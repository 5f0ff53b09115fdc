"""
Version 1 of the API.

Bundles the article, post-it and tag endpoints.  ``main`` mounts this
router under ``/api``.
"""
