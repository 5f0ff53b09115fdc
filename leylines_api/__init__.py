"""
Top-level package for the Leylines note board.

The package provides no public exports; the web application lives in
``leylines_api.app`` and the HTTP client in ``leylines_api.client``.
"""

__all__ = []
