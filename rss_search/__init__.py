"""Index syndication feeds and search their articles by word frequency."""

__version__ = "0.1.0"
