"""docseek: paginated retrieval of typed documents from a search engine."""

__version__ = "0.1.0"
