"""Configuration, logging, error types and the SQLite store handle."""
