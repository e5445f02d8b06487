"""contentgov - permission governance for analytics platform content."""

__version__ = "0.1.0"
