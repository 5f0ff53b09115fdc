"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one domain (articles, post-its,
tags, health).  The routers are aggregated in ``router.py``.
"""
