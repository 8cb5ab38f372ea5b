"""MyList: personal saved-items list with a two-tier page cache."""

__version__ = "1.0.0"
