"""Leylines API client.

A thin wrapper around the Leylines JSON API for scripts and bots.  The
client uses the ``requests`` library internally; any object with a
compatible ``request`` method (such as FastAPI's ``TestClient``) can be
passed in as ``session``.

Every method returns a tuple ``(data, error)``.  On success ``data`` is
the decoded JSON body and ``error`` is ``None``.  On failure ``data`` is
``None`` (or an empty list for listing helpers) and ``error`` is a
dictionary with the keys ``status_code`` and ``message``.

Example::

    api = LeylinesAPI("http://localhost:5000/api")
    board, error = api.quick_create_article()
    if error:
        print(error["message"])
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class LeylinesAPI:
    """Client for the articles, post-its and tags endpoints."""

    def __init__(self, base_url: str, session: Any = None, timeout: float = 15) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PATCH``, ``DELETE``, etc.).
            path: Path relative to :attr:`base_url` (e.g. ``/articles``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.
        """
        url = f"{self.base_url}{path}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError:
                data = None
        if response.status_code >= 400:
            message = ""
            if isinstance(data, dict):
                message = data.get("error") or data.get("message") or str(data)
            if not message:
                message = response.text or f"HTTP {response.status_code}"
            logger.error("API request failed (%s): %s", response.status_code, message)
            return None, {"status_code": response.status_code, "message": message}
        return data, None

    # ------------------------------------------------------------------
    # Service information
    # ------------------------------------------------------------------
    def info(self) -> Result:
        return self._request("GET", "")

    def health(self) -> Result:
        return self._request("GET", "/health")

    # ------------------------------------------------------------------
    # Article operations
    # ------------------------------------------------------------------
    def list_articles(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
    ) -> Result:
        """Retrieve a page of articles.

        Returns:
            A tuple ``(page, error)`` where ``page`` has the keys
            ``articles`` and ``pagination``.
        """
        params = {
            "page": page,
            "limit": limit,
            "tags": ",".join(tags) if tags else None,
            "search": search,
        }
        return self._request("GET", "/articles", params=params)

    def get_article(self, article_id: Any) -> Result:
        return self._request("GET", f"/articles/{article_id}")

    def create_article(self, payload: Dict[str, Any]) -> Result:
        """Create an article from ``title``, ``content``, ``summary``, ``tags`` and ``isPublished``."""
        return self._request("POST", "/articles", json_body=payload)

    def quick_create_article(self) -> Result:
        return self._request("POST", "/articles/quick")

    def update_article(self, article_id: Any, payload: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/articles/{article_id}", json_body=payload)

    def delete_article(self, article_id: Any) -> Tuple[bool, Optional[Dict[str, Any]]]:
        """Delete an article with its post-its.

        Returns:
            A tuple ``(success, error)``.
        """
        data, error = self._request("DELETE", f"/articles/{article_id}")
        if error:
            return False, error
        return data is not None, None

    def add_article_tags(self, article_id: Any, tags: List[str]) -> Result:
        return self._request("POST", f"/articles/{article_id}/tags", json_body={"tags": tags})

    def remove_article_tags(self, article_id: Any, tags: List[str]) -> Result:
        return self._request("DELETE", f"/articles/{article_id}/tags", json_body={"tags": tags})

    def get_board(self, article_id: Any) -> Result:
        """Fetch an article's title together with all of its post-its."""
        return self._request("GET", f"/articles/{article_id}/postits")

    # ------------------------------------------------------------------
    # Post-it operations
    # ------------------------------------------------------------------
    def list_postits(
        self, page: int = 1, limit: Optional[int] = None, article_id: Any = None
    ) -> Result:
        params = {"page": page, "limit": limit, "articleId": article_id}
        return self._request("GET", "/postits", params=params)

    def get_postit(self, postit_id: Any) -> Result:
        return self._request("GET", f"/postits/{postit_id}")

    def create_postit(
        self,
        article_id: Any,
        content: str,
        position: Optional[Dict[str, Any]] = None,
        color: Optional[str] = None,
    ) -> Result:
        payload: Dict[str, Any] = {"articleId": article_id, "content": content}
        if position is not None:
            payload["position"] = position
        if color is not None:
            payload["color"] = color
        return self._request("POST", "/postits", json_body=payload)

    def update_postit(self, postit_id: Any, payload: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/postits/{postit_id}", json_body=payload)

    def move_postit(self, postit_id: Any, position: Dict[str, Any]) -> Result:
        """Replace a post-it's position (``x``, ``y``, ``width``, ``height``, ``zIndex``)."""
        return self._request("PATCH", f"/postits/{postit_id}/position", json_body={"position": position})

    def bring_to_front(self, postit_id: Any) -> Result:
        return self._request("POST", f"/postits/{postit_id}/bring-to-front")

    def bulk_update_positions(self, updates: List[Dict[str, Any]]) -> Result:
        """Move several post-its at once.

        Args:
            updates: A list of ``{"id": ..., "position": {...}}`` items.
        Returns:
            A tuple ``(result, error)``; ``result`` carries
            ``modifiedCount`` and ``failedIds``.
        """
        return self._request("POST", "/postits/bulk-update-positions", json_body={"updates": updates})

    def delete_postit(self, postit_id: Any) -> Tuple[bool, Optional[Dict[str, Any]]]:
        data, error = self._request("DELETE", f"/postits/{postit_id}")
        if error:
            return False, error
        return data is not None, None

    # ------------------------------------------------------------------
    # Tag operations
    # ------------------------------------------------------------------
    def list_tags(
        self, search: Optional[str] = None, sort_by: Optional[str] = None, with_count: bool = False
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Retrieve all tags.

        Returns:
            A tuple ``(tags, error)``. ``tags`` is empty on failure.
        """
        params = {
            "search": search,
            "sortBy": sort_by,
            "withCount": "true" if with_count else None,
        }
        data, error = self._request("GET", "/tags", params=params)
        if error:
            return [], error
        return data if isinstance(data, list) else [], None

    def popular_tags(self, limit: int = 10) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/tags/popular", params={"limit": limit})
        if error:
            return [], error
        return data if isinstance(data, list) else [], None

    def get_tag(self, tag_id: Any) -> Result:
        return self._request("GET", f"/tags/{tag_id}")

    def get_tag_by_name(self, name: str) -> Result:
        return self._request("GET", f"/tags/name/{quote(name, safe='')}")

    def create_tag(self, name: str, description: str = "", color: Optional[str] = None) -> Result:
        payload: Dict[str, Any] = {"name": name, "description": description}
        if color is not None:
            payload["color"] = color
        return self._request("POST", "/tags", json_body=payload)

    def update_tag(self, tag_id: Any, payload: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/tags/{tag_id}", json_body=payload)

    def delete_tag(self, tag_id: Any) -> Tuple[bool, Optional[Dict[str, Any]]]:
        data, error = self._request("DELETE", f"/tags/{tag_id}")
        if error:
            return False, error
        return data is not None, None
