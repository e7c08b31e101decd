"""Seeding, query and mutation engine shared by every collection."""

from dashstore.engine.collection import Collection, CollectionSchema, Series, Singleton
from dashstore.engine.query import Page, QueryParams, QuerySpec
from dashstore.engine.runtime import StoreRuntime
from dashstore.engine.seeding import SeedContext

__all__ = [
    "Collection",
    "CollectionSchema",
    "Series",
    "Singleton",
    "Page",
    "QueryParams",
    "QuerySpec",
    "StoreRuntime",
    "SeedContext",
]
