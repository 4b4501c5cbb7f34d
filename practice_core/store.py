"""Persistent store: named record collections over a durable key/value medium

Collections are read and written as whole snapshots. Concurrent writers to
one collection are serialized by ``Store.update``.
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Callable, Optional

from sqlalchemy import Column, String, Text, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import STORE_KEY_PREFIX
from .exceptions import CorruptDataError, StoreUnavailableError

logger = logging.getLogger(__name__)


class Collection(str, Enum):
    """Named collections kept by the store"""
    ACCOUNTS = "accounts"
    PROFILES = "profiles"
    DEBATES = "debates"
    MESSAGES = "messages"
    ANALYSES = "analyses"
    SESSION = "session"


class Medium:
    """Durable key -> string mapping"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryMedium(Medium):
    """Process-local medium, used for tests and throwaway runs"""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


Base = declarative_base()


class KeyValue(Base):
    __tablename__ = "kv_store"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)


class SqlMedium(Medium):
    """SQLAlchemy-backed medium (sqlite by default)"""

    def __init__(self, url: str):
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        try:
            self.engine = create_engine(url, future=True, connect_args=connect_args)
            if url.startswith("sqlite"):
                event.listen(self.engine, "connect", _set_sqlite_pragma)
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Cannot open store medium: {e}") from e
        self._sessions = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    def get(self, key: str) -> Optional[str]:
        try:
            with self._sessions() as db:
                row = db.get(KeyValue, key)
                return row.value if row else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Cannot read '{key}': {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._sessions.begin() as db:
                db.merge(KeyValue(key=key, value=value))
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Cannot write '{key}': {e}") from e

    def remove(self, key: str) -> None:
        try:
            with self._sessions.begin() as db:
                row = db.get(KeyValue, key)
                if row is not None:
                    db.delete(row)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Cannot remove '{key}': {e}") from e

    def close(self) -> None:
        self.engine.dispose()


def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA synchronous=NORMAL;")
    cursor.close()


class Store:
    """Whole-collection read/replace access to the medium

    Every call sleeps for ``latency`` seconds first so that callers see the
    same loading states they would against a remote database. Mutations go
    through ``update``, which holds a per-collection lock across the read and
    the write.
    """

    def __init__(self, medium: Medium, latency: float = 0.2, prefix: str = STORE_KEY_PREFIX):
        self.medium = medium
        self.latency = latency
        self.prefix = prefix
        self._locks = {collection: asyncio.Lock() for collection in Collection}

    def _key(self, collection: Collection) -> str:
        return f"{self.prefix}.{Collection(collection).value}"

    async def _delay(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def load(self, collection: Collection) -> list[dict]:
        """Read every record of a collection

        Returns:
            The stored records, or an empty list if nothing was ever written

        Raises:
            CorruptDataError: If the stored value is not a JSON list of objects
            StoreUnavailableError: If the medium cannot be read
        """
        collection = Collection(collection)
        await self._delay()
        raw = self.medium.get(self._key(collection))
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.error("Corrupt data in collection %s: %s", collection.value, e)
            raise CorruptDataError(collection.value, str(e)) from e
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            logger.error("Corrupt data in collection %s: not a list of records", collection.value)
            raise CorruptDataError(collection.value, "not a list of records")
        return records

    async def save(self, collection: Collection, records: list[dict]) -> None:
        """Replace a whole collection

        Raises:
            StoreUnavailableError: If the medium cannot be written
        """
        collection = Collection(collection)
        await self._delay()
        self.medium.set(self._key(collection), json.dumps(records))
        logger.debug("Saved %d records to %s", len(records), collection.value)

    async def update(
        self,
        collection: Collection,
        fn: Callable[[list[dict]], list[dict]],
    ) -> list[dict]:
        """Read, transform and write back a collection under its lock

        Args:
            collection: Collection to change
            fn: Receives the current records and returns the records to store.
                If it raises, nothing is written.

        Returns:
            The records written

        Raises:
            CorruptDataError: If the stored value cannot be read
            StoreUnavailableError: If the medium cannot be read or written
        """
        collection = Collection(collection)
        async with self._locks[collection]:
            records = fn(await self.load(collection))
            await self.save(collection, records)
            return records

    async def set_current_account(self, account_id: Optional[str]) -> None:
        """Store or clear the current-session pointer"""
        await self._delay()
        key = self._key(Collection.SESSION)
        if account_id is None:
            self.medium.remove(key)
        else:
            self.medium.set(key, json.dumps({"account_id": account_id}))

    async def get_current_account(self) -> Optional[str]:
        """Read the current-session pointer

        Raises:
            CorruptDataError: If the pointer record cannot be parsed
        """
        await self._delay()
        raw = self.medium.get(self._key(Collection.SESSION))
        if not raw:
            return None
        try:
            pointer = json.loads(raw)
            return pointer["account_id"]
        except (ValueError, TypeError, KeyError) as e:
            logger.error("Corrupt session pointer: %s", e)
            raise CorruptDataError(Collection.SESSION.value, str(e)) from e
