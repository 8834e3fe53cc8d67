"""Books REST API: CRUD, lookups, pagination and star-bucket rating mutation."""

__version__ = "1.0.0"
