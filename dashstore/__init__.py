"""dashstore: a local persistent entity store with seeded sample data."""

from dashstore.engine.query import Page, QueryParams
from dashstore.store import EntityStore, open_store

__version__ = "0.1.0"

__all__ = ["EntityStore", "open_store", "Page", "QueryParams", "__version__"]
