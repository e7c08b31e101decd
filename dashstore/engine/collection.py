"""Generic persisted collection: seeding, queries and mutations.

A ``Collection`` is instantiated once per entity type with a
``CollectionSchema`` describing the model, how it is searched and ordered,
which fields callers may set, how omitted fields are defaulted and derived
fields normalized, and how the collection is seeded.

Every operation fully loads the blob, seeds it if it has never been written,
computes, and (for mutations) writes the whole collection back before
returning. There is no locking: last write wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Iterable, Mapping, Sequence, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from dashstore.core.exceptions import NotFoundError, PersistenceReadError, ValidationError
from dashstore.core.logging import get_logger, operation_scope
from dashstore.core.persistence import PersistenceAdapter
from dashstore.engine.clock import normalize_bound
from dashstore.engine.query import Page, QueryParams, QuerySpec, is_unfiltered, match_id, run_query, sort_records
from dashstore.engine.runtime import StoreRuntime
from dashstore.engine.seeding import SeedContext

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)
M = TypeVar("M", bound=BaseModel)

SeedFn = Callable[[SeedContext, Mapping[str, list[Any]]], list[Any]]


@dataclass(frozen=True)
class CollectionSchema(Generic[T]):
    """Everything that makes one entity collection different from another."""

    key: str
    model: type[T]
    query: QuerySpec[T]
    seed: SeedFn
    creatable: frozenset[str]
    updatable: frozenset[str]
    required: tuple[str, ...] = ()
    # Filled in for fields the payload omits (may draw on runtime.rng)
    defaults: Callable[[StoreRuntime], dict[str, Any]] | None = None
    normalizers: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    # Stamped with "now" at creation unless the payload sets it
    created_field: str | None = None
    # Refreshed with "now" on every update unless the changes set it
    reorders_on_update: bool = False
    activity_field: str | None = None
    # (field, first, second) for toggle_status()
    toggle: tuple[str, str, str] | None = None
    # Other collections whose records the seed routine reads
    seed_from: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.model.__name__

    def canonical(self, records: Sequence[T]) -> list[T]:
        spec = self.query
        return sort_records(records, spec.sort_fields[spec.default_sort], spec.default_dir)


class Collection(Generic[T]):
    """Uniform list/create/update/delete contract over one persisted blob."""

    def __init__(
        self,
        schema: CollectionSchema[T],
        adapter: PersistenceAdapter,
        runtime: StoreRuntime,
        sources: Mapping[str, "Collection[Any]"] | None = None,
    ):
        self.schema = schema
        self._adapter = adapter
        self._runtime = runtime
        self._sources = dict(sources or {})
        # Every collection can be narrowed to a single id
        self.query = replace(schema.query, filters={"id": match_id, **schema.query.filters})

    @property
    def key(self) -> str:
        return self.schema.key

    def link(self, name: str, collection: "Collection[Any]") -> None:
        """Make another collection reachable (seed source, parent or cascade target)."""
        self._sources[name] = collection

    def related(self, name: str) -> "Collection[Any]":
        return self._sources[name]

    # ------------------------------------------------------------------
    # Persistence + seeding
    # ------------------------------------------------------------------
    def _decode(self, raw: Any) -> list[T] | None:
        if raw is None:
            return None
        try:
            if not isinstance(raw, list):
                raise PersistenceReadError(self.key, "expected a list")
            return [self.schema.model.model_validate(item) for item in raw]
        except (PersistenceReadError, PydanticValidationError) as exc:
            logger.warning(
                "Stored records do not match schema, treating collection as empty",
                data={"key": self.key, "reason": str(exc)[:200]},
            )
            return None

    async def _load(self) -> list[T] | None:
        return self._decode(await self._adapter.load(self.key))

    async def _persist(self, records: Iterable[T]) -> None:
        await self._adapter.save(
            self.key,
            [record.model_dump(mode="json", exclude_none=True) for record in records],
        )

    async def _ensure_seeded(self) -> list[T]:
        records = await self._load()
        if records is not None:
            return records
        sources = {name: await self._sources[name].all() for name in self.schema.seed_from}
        seeded = self.schema.canonical(
            [
                self.schema.model.model_validate(item)
                for item in self.schema.seed(self._runtime.seed_context(self.key), sources)
            ]
        )
        await self._persist(seeded)
        logger.info("Seeded collection", data={"key": self.key, "count": len(seeded)})
        return seeded

    async def all(self) -> list[T]:
        """Every record in canonical order."""
        return await self._ensure_seeded()

    async def reset(self) -> None:
        """Drop the stored blob; the next access seeds again."""
        with operation_scope(self.key, "reset"):
            await self._adapter.remove(self.key)
            logger.info("Collection reset", data={"key": self.key})

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------
    def _check_fields(self, payload: Mapping[str, Any], allowed: frozenset[str], action: str) -> dict[str, Any]:
        unknown = sorted(set(payload) - allowed)
        if unknown:
            raise ValidationError(
                f"Cannot {action} {self.schema.label} field(s): {', '.join(unknown)}",
                details={"collection": self.key, "fields": unknown},
            )
        data = dict(payload)
        for name in self.schema.required:
            if name not in data:
                continue
            value = data[name]
            if isinstance(value, str):
                value = value.strip()
                data[name] = value
            if value is None or value == "":
                raise ValidationError(
                    f"{name.replace('_', ' ').capitalize()} is required",
                    details={"collection": self.key, "field": name},
                )
        for name, normalize in self.schema.normalizers.items():
            if data.get(name) is not None:
                try:
                    data[name] = normalize(data[name])
                except (TypeError, ValueError) as exc:
                    raise ValidationError(
                        f"Invalid value for {name}",
                        details={"collection": self.key, "field": name},
                    ) from exc
        return data

    def _build(self, data: Mapping[str, Any]) -> T:
        try:
            return self.schema.model.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, self.key) from exc

    def _merge(self, record: T, changes: Mapping[str, Any], now: str) -> T:
        merged = record.model_dump()
        merged.update(changes)
        activity = self.schema.activity_field
        if self.schema.reorders_on_update and activity and activity not in changes:
            merged[activity] = now
        return self._build(merged)

    def _params(self, params: QueryParams | None, kwargs: dict[str, Any]) -> QueryParams:
        if params is None:
            fields = set(QueryParams.model_fields) - {"filters"}
            base = {k: v for k, v in kwargs.items() if k in fields}
            filters = dict(kwargs.pop("filters", None) or {})
            filters.update({k: v for k, v in kwargs.items() if k not in fields})
            base.setdefault("page_size", self._runtime.default_page_size)
            try:
                params = QueryParams(**base, filters=filters)
            except PydanticValidationError as exc:
                raise ValidationError.from_pydantic(exc, self.key) from exc
        elif kwargs:
            raise ValidationError("Pass either a QueryParams instance or keyword arguments, not both")

        spec = self.query
        unknown = sorted(set(params.filters) - set(spec.filters))
        if unknown:
            raise ValidationError(
                f"Unsupported {self.key} filter(s): {', '.join(unknown)}",
                details={"collection": self.key, "filters": unknown},
            )
        for name, value in params.filters.items():
            if name in spec.validators and not is_unfiltered(value):
                spec.validators[name](value)
        normalize_bound(params.date_from)
        normalize_bound(params.date_to, end=True)
        if params.sort_by is not None and params.sort_by not in spec.sort_fields:
            raise ValidationError(
                f"Cannot sort {self.key} by {params.sort_by}",
                details={"collection": self.key, "allowed": sorted(spec.sort_fields)},
            )
        if params.page_size > self._runtime.max_page_size:
            raise ValidationError(
                f"page_size must be <= {self._runtime.max_page_size}",
                details={"collection": self.key},
            )
        return params

    @staticmethod
    def _index_of(records: Sequence[T], id: str) -> int:
        for idx, record in enumerate(records):
            if record.id == id:
                return idx
        return -1

    def _not_found(self, id: str) -> NotFoundError:
        return NotFoundError(f"{self.schema.label} not found", collection=self.key, id=id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def list(self, params: QueryParams | None = None, **kwargs: Any) -> Page[T]:
        """Filtered, sorted, paginated view of the collection."""
        with operation_scope(self.key, "list"):
            query = self._params(params, kwargs)
            records = await self._ensure_seeded()
            return run_query(records, self.query, query)

    async def get(self, id: str) -> T:
        with operation_scope(self.key, "get"):
            records = await self._ensure_seeded()
            idx = self._index_of(records, id)
            if idx == -1:
                raise self._not_found(id)
            return records[idx]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def _before_create(self, record: T) -> None:
        """Hook for cross-collection checks (e.g. parent existence)."""
        return None

    async def create(self, payload: Mapping[str, Any]) -> T:
        """Insert a new record.

        Omitted optional fields get their defaults, derived fields are
        normalized, an id and creation timestamp are assigned, and the whole
        collection is re-sorted and persisted.
        """
        with operation_scope(self.key, "create"):
            data = self._check_fields(payload, self.schema.creatable, "create")
            missing = [name for name in self.schema.required if name not in data]
            if missing:
                raise ValidationError(
                    f"{missing[0].replace('_', ' ').capitalize()} is required",
                    details={"collection": self.key, "field": missing[0]},
                )
            records = await self._ensure_seeded()

            draft: dict[str, Any] = {}
            if self.schema.defaults is not None:
                draft.update(self.schema.defaults(self._runtime))
            draft.update({name: value for name, value in data.items() if value is not None})
            created = self.schema.created_field
            if created and draft.get(created) is None:
                draft[created] = self._runtime.timestamp()
            draft["id"] = self._runtime.new_id()
            record = self._build(draft)

            await self._before_create(record)
            await self._persist(self.schema.canonical([record, *records]))
            logger.info("Record created", data={"key": self.key, "id": record.id})
            return record

    async def prepend(self, new_records: Sequence[T]) -> None:
        """Insert already-built records (generated activity, not caller input)."""
        records = await self._ensure_seeded()
        await self._persist(self.schema.canonical([*new_records, *records]))

    async def update(self, id: str, changes: Mapping[str, Any]) -> T:
        """Partially update one record; unknown ids raise NotFoundError."""
        with operation_scope(self.key, "update"):
            data = self._check_fields(changes, self.schema.updatable, "update")
            records = await self._ensure_seeded()
            idx = self._index_of(records, id)
            if idx == -1:
                raise self._not_found(id)
            updated = self._merge(records[idx], data, self._runtime.timestamp())
            records[idx] = updated
            await self._persist(self.schema.canonical(records))
            logger.debug("Record updated", data={"key": self.key, "id": id, "fields": sorted(data)})
            return updated

    async def update_bulk(self, ids: Iterable[str], changes: Mapping[str, Any]) -> None:
        """Apply the same changes to every listed record. Unknown ids are ignored."""
        id_set = set(ids)
        if not id_set:
            return
        with operation_scope(self.key, "update_bulk"):
            data = self._check_fields(changes, self.schema.updatable, "update")
            records = await self._ensure_seeded()
            now = self._runtime.timestamp()
            touched = 0
            for idx, record in enumerate(records):
                if record.id in id_set:
                    records[idx] = self._merge(record, data, now)
                    touched += 1
            await self._persist(self.schema.canonical(records))
            logger.info("Bulk update", data={"key": self.key, "requested": len(id_set), "updated": touched})

    async def delete(self, id: str) -> None:
        """Remove one record. Deleting an absent id is a no-op."""
        with operation_scope(self.key, "delete"):
            await self._remove_ids({id})

    async def delete_bulk(self, ids: Iterable[str]) -> None:
        """Remove every listed record. Unknown ids are ignored."""
        id_set = set(ids)
        if not id_set:
            return
        with operation_scope(self.key, "delete_bulk"):
            await self._remove_ids(id_set)

    async def _remove_ids(self, id_set: set[str]) -> int:
        return await self.remove_where(lambda record: record.id in id_set)

    async def remove_where(self, predicate: Callable[[T], bool]) -> int:
        """Remove every record matching ``predicate``; returns how many went."""
        records = await self._ensure_seeded()
        kept = [record for record in records if not predicate(record)]
        removed = len(records) - len(kept)
        if removed:
            await self._persist(kept)
            logger.info("Records deleted", data={"key": self.key, "count": removed})
        return removed

    async def toggle_status(self, id: str) -> T:
        """Flip the collection's two-valued status to its opposite."""
        if self.schema.toggle is None:
            raise ValidationError(f"{self.schema.label} has no toggleable status", details={"collection": self.key})
        name, first, second = self.schema.toggle
        current = await self.get(id)
        value = second if getattr(current, name) == first else first
        return await self.update(id, {name: value})


class Singleton(Generic[M]):
    """A single persisted aggregate record (metrics, KPIs)."""

    def __init__(
        self,
        key: str,
        model: type[M],
        seed: Callable[[SeedContext], M],
        adapter: PersistenceAdapter,
        runtime: StoreRuntime,
    ):
        self.key = key
        self._model = model
        self._seed = seed
        self._adapter = adapter
        self._runtime = runtime

    async def get(self) -> M:
        raw = await self._adapter.load(self.key)
        if raw is not None:
            try:
                return self._model.model_validate(raw)
            except PydanticValidationError:
                logger.warning("Stored aggregate does not match schema, reseeding", data={"key": self.key})
        value = self._seed(self._runtime.seed_context(self.key))
        await self.put(value)
        logger.info("Seeded aggregate", data={"key": self.key})
        return value

    async def put(self, value: M) -> None:
        await self._adapter.save(self.key, value.model_dump(mode="json"))

    async def reset(self) -> None:
        await self._adapter.remove(self.key)


class Series(Generic[M]):
    """An ordered list of id-less records (one per day), kept ascending by date.

    ``source`` names another series the seed routine derives from; it is read
    (and seeded if needed) before this one is seeded.
    """

    def __init__(
        self,
        key: str,
        model: type[M],
        seed: Callable[[SeedContext, list[Any] | None], list[Any]],
        adapter: PersistenceAdapter,
        runtime: StoreRuntime,
        source: "Series[Any] | None" = None,
    ):
        self.key = key
        self._model = model
        self._seed = seed
        self._adapter = adapter
        self._runtime = runtime
        self._source = source

    def _ordered(self, items: Iterable[M]) -> list[M]:
        return sorted(items, key=lambda item: item.date)

    async def get(self) -> list[M]:
        raw = await self._adapter.load(self.key)
        if isinstance(raw, list):
            try:
                return self._ordered(self._model.model_validate(item) for item in raw)
            except PydanticValidationError:
                logger.warning("Stored series does not match schema, reseeding", data={"key": self.key})
        elif raw is not None:
            logger.warning("Stored series is not a list, reseeding", data={"key": self.key})
        upstream = await self._source.get() if self._source is not None else None
        items = self._ordered(
            self._model.model_validate(item) for item in self._seed(self._runtime.seed_context(self.key), upstream)
        )
        await self.put(items)
        logger.info("Seeded series", data={"key": self.key, "count": len(items)})
        return items

    async def put(self, items: Iterable[M]) -> None:
        await self._adapter.save(self.key, [item.model_dump(mode="json") for item in self._ordered(items)])

    async def reset(self) -> None:
        await self._adapter.remove(self.key)
