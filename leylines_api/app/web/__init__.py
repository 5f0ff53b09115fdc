"""Server-rendered pages for the board UI."""
