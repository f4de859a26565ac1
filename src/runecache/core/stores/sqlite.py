"""Embedded relational store on SQLite via SQLAlchemy Core."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import (
    Boolean,
    Column,
    Engine,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    func,
    inspect,
    select,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from runecache.core.contracts.catalog import FLAG_FIELDS, TEXT_FIELDS, CatalogItem
from runecache.core.contracts.exceptions import SchemaError, StoreError
from runecache.core.contracts.store import SCHEMA_VERSION, SCHEMA_VERSION_KEY, PersistentStore

_LOG = logging.getLogger(__name__)

T = TypeVar("T")

metadata_obj = MetaData()

runestones = Table(
    "runestones",
    metadata_obj,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
    *(Column(name, String, nullable=True) for name in TEXT_FIELDS),
    *(Column(name, Boolean, nullable=False, default=False) for name in FLAG_FIELDS),
    Index("idx_coordinates", "latitude", "longitude"),
    Index("idx_slug", "slug"),
)

cache_metadata = Table(
    "cache_metadata",
    metadata_obj,
    Column("key", String, primary_key=True),
    Column("value", String, nullable=False),
)

_UPSERT_COLUMNS = tuple(column.name for column in runestones.columns if column.name != "id")


def _row_to_item(row: Any) -> CatalogItem:
    return CatalogItem.model_validate(dict(row._mapping))


class SqliteStore(PersistentStore):
    """Catalog mirror in a SQLite file.

    SQLAlchemy's engine is synchronous, so every statement runs in a worker
    thread. The asyncio lock keeps access to the database serialized.
    """

    def __init__(self, path: str | Path, *, schema_version: int = SCHEMA_VERSION) -> None:
        self._path = Path(path)
        self._schema_version = schema_version
        self._engine: Engine | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def open(self) -> None:
        if self._engine is not None:
            return
        await self._run(self._open_sync, opening=True)

    async def close(self) -> None:
        if self._engine is None:
            return
        engine = self._engine
        self._engine = None
        await asyncio.to_thread(engine.dispose)

    async def count(self) -> int:
        def _count(engine: Engine) -> int:
            with engine.connect() as conn:
                return int(conn.execute(select(func.count()).select_from(runestones)).scalar_one())

        return await self._with_engine(_count)

    async def get_all(self) -> list[CatalogItem]:
        def _get_all(engine: Engine) -> list[CatalogItem]:
            with engine.connect() as conn:
                rows = conn.execute(select(runestones).order_by(runestones.c.id))
                return [_row_to_item(row) for row in rows]

        return await self._with_engine(_get_all)

    async def get_by_slug(self, slug: str) -> CatalogItem | None:
        def _get_by_slug(engine: Engine) -> CatalogItem | None:
            stmt = select(runestones).where(runestones.c.slug == slug).order_by(runestones.c.id).limit(1)
            with engine.connect() as conn:
                row = conn.execute(stmt).first()
            return _row_to_item(row) if row is not None else None

        return await self._with_engine(_get_by_slug)

    async def get_by_id(self, item_id: int) -> CatalogItem | None:
        def _get_by_id(engine: Engine) -> CatalogItem | None:
            with engine.connect() as conn:
                row = conn.execute(select(runestones).where(runestones.c.id == item_id)).first()
            return _row_to_item(row) if row is not None else None

        return await self._with_engine(_get_by_id)

    async def bulk_upsert(self, items: Iterable[CatalogItem]) -> None:
        records = [item.to_record() for item in items]
        if not records:
            return

        def _upsert(engine: Engine) -> None:
            stmt = sqlite_insert(runestones)
            stmt = stmt.on_conflict_do_update(
                index_elements=[runestones.c.id],
                set_={name: stmt.excluded[name] for name in _UPSERT_COLUMNS},
            )
            with engine.begin() as conn:
                conn.execute(stmt, records)

        await self._with_engine(_upsert)

    async def delete_all(self) -> None:
        def _delete_all(engine: Engine) -> None:
            with engine.begin() as conn:
                conn.execute(delete(runestones))
                conn.execute(delete(cache_metadata).where(cache_metadata.c.key != SCHEMA_VERSION_KEY))

        await self._with_engine(_delete_all)

    async def get_metadata(self, key: str) -> str | None:
        def _get(engine: Engine) -> str | None:
            with engine.connect() as conn:
                return conn.execute(select(cache_metadata.c.value).where(cache_metadata.c.key == key)).scalar()

        return await self._with_engine(_get)

    async def set_metadata(self, key: str, value: str) -> None:
        def _set(engine: Engine) -> None:
            with engine.begin() as conn:
                self._put_metadata(conn, key, value)

        await self._with_engine(_set)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _put_metadata(conn: Any, key: str, value: str) -> None:
        stmt = sqlite_insert(cache_metadata).values(key=key, value=value)
        conn.execute(stmt.on_conflict_do_update(index_elements=[cache_metadata.c.key], set_={"value": value}))

    def _open_sync(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{self._path}", connect_args={"check_same_thread": False})
        try:
            with engine.begin() as conn:
                current_version = self._read_schema_version(conn)
                if current_version != self._schema_version:
                    _LOG.info(
                        "Schema version mismatch (current: %s, target: %s); dropping tables",
                        current_version,
                        self._schema_version,
                    )
                    metadata_obj.drop_all(conn)
                metadata_obj.create_all(conn)
                if current_version != self._schema_version:
                    self._put_metadata(conn, SCHEMA_VERSION_KEY, str(self._schema_version))
        except SQLAlchemyError:
            engine.dispose()
            raise
        self._engine = engine

    @staticmethod
    def _read_schema_version(conn: Any) -> int | None:
        if not inspect(conn).has_table(cache_metadata.name):
            return None
        raw = conn.execute(
            select(cache_metadata.c.value).where(cache_metadata.c.key == SCHEMA_VERSION_KEY)
        ).scalar()
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    async def _with_engine(self, fn: Callable[[Engine], T]) -> T:
        def _call() -> T:
            if self._engine is None:
                raise StoreError(f"sqlite store is not open: {self._path}")
            return fn(self._engine)

        return await self._run(_call)

    async def _run(self, fn: Callable[[], T], *, opening: bool = False) -> T:
        async with self._lock:
            try:
                return await asyncio.to_thread(fn)
            except SQLAlchemyError as exc:
                if opening:
                    raise SchemaError(f"failed opening sqlite store {self._path}: {exc}") from exc
                raise StoreError(f"sqlite store operation failed: {exc}") from exc
            except OSError as exc:
                raise StoreError(f"sqlite store I/O failed at {self._path}: {exc}") from exc
