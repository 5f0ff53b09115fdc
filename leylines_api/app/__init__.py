"""
Application package initializer.

The app is organised the usual way: ``core`` holds configuration,
logging, errors and the store; ``schemas`` the pydantic payloads;
``services`` the business rules for articles, post-its and tags;
``api/v1`` the JSON routes; and ``web`` the board UI pages.
"""

from .main import app  # noqa: F401
