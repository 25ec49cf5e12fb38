"""HTML content extraction."""
