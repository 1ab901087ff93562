"""Document store over the relational database

Documents are JSON objects addressed by slash-separated paths. A document path
has an even number of segments (``players/alice``); a collection path has an
odd number (``players``, ``players/alice/inventory``). Subcollections are just
collections nested under a document path.

All writes go through a single database transaction: ``run_transaction`` for
read-modify-write, ``batch`` for grouped writes, and the single-document
helpers (``set``, ``update``, ``delete``, ``increment``) which each open their
own.
"""
import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, TypeVar

from backend.database import Database, DatabaseConnection, execute_query

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DocumentStoreError(Exception):
    """The underlying database failed"""


class DocumentNotFound(LookupError):
    """An update targeted a document that does not exist"""

    def __init__(self, path: str):
        super().__init__(f"Document not found: {path}")
        self.path = path


def _segments(path: str) -> List[str]:
    segments = path.strip("/").split("/")
    if any(not s for s in segments):
        raise ValueError(f"Invalid path: {path!r}")
    return segments


def split_document_path(path: str) -> Tuple[str, str]:
    """Split a document path into (collection, doc_id)"""
    segments = _segments(path)
    if len(segments) < 2 or len(segments) % 2 != 0:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(segments[:-1]), segments[-1]


def normalize_collection_path(path: str) -> str:
    """Validate a collection path and return it without surrounding slashes"""
    segments = _segments(path)
    if len(segments) % 2 != 1:
        raise ValueError(f"Not a collection path: {path!r}")
    return "/".join(segments)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sort_documents(docs: List[Tuple[str, Dict[str, Any]]], order_by: List[Tuple[str, str]]) -> List[Tuple[str, Dict[str, Any]]]:
    """Sort (doc_id, data) pairs; documents missing a field sort last"""
    # Stable sorts applied from the least significant key to the most significant
    for field, direction in reversed(order_by):
        descending = direction.lower() == "desc"
        if descending:
            docs.sort(key=lambda d: (d[1].get(field) is not None, d[1].get(field)), reverse=True)
        else:
            docs.sort(key=lambda d: (d[1].get(field) is None, d[1].get(field)))
    return docs


class Transaction:
    """Reads and writes that commit or roll back together"""

    def __init__(self, store: "DocumentStore", conn: DatabaseConnection):
        self._store = store
        self._conn = conn

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a document, locking its row on PostgreSQL"""
        collection, doc_id = split_document_path(path)
        sql = "SELECT data FROM documents WHERE collection = ? AND doc_id = ?"
        if self._store.database.db_type == "postgresql":
            sql += " FOR UPDATE"
        row = self._store._execute(self._conn, sql, (collection, doc_id)).fetchone()
        if row is None:
            return None
        return json.loads(row["data"])

    def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> Dict[str, Any]:
        """Create or overwrite a document; merge=True keeps fields not in data"""
        collection, doc_id = split_document_path(path)
        if merge:
            existing = self.get(path) or {}
            data = {**existing, **data}
        self._write(collection, doc_id, data)
        return data

    def update(self, path: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Merge fields into an existing document"""
        existing = self.get(path)
        if existing is None:
            raise DocumentNotFound(path)
        collection, doc_id = split_document_path(path)
        data = {**existing, **fields}
        self._write(collection, doc_id, data)
        return data

    def delete(self, path: str) -> bool:
        collection, doc_id = split_document_path(path)
        cursor = self._store._execute(
            self._conn,
            "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
            (collection, doc_id),
        )
        return cursor.rowcount > 0

    def delete_collection(self, collection: str) -> int:
        """Delete every document in a collection and its nested subcollections"""
        collection = normalize_collection_path(collection)
        escaped = collection.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        cursor = self._store._execute(
            self._conn,
            "DELETE FROM documents WHERE collection = ? OR collection LIKE ? ESCAPE '\\'",
            (collection, escaped + "/%"),
        )
        return cursor.rowcount

    def increment(self, path: str, field: str, amount: float = 1) -> float:
        """Add to a numeric field, starting from 0 when the document or field is missing"""
        data = self.get(path) or {}
        current = data.get(field) or 0
        if not isinstance(current, (int, float)) or isinstance(current, bool):
            raise TypeError(f"Field {field!r} of {path} is not numeric")
        data[field] = current + amount
        collection, doc_id = split_document_path(path)
        self._write(collection, doc_id, data)
        return data[field]

    def _write(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        now = utc_now_iso()
        self._store._execute(
            self._conn,
            """
            INSERT INTO documents (collection, doc_id, data, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (collection, doc_id)
            DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
            """,
            (collection, doc_id, json.dumps(data, sort_keys=True), now, now),
        )


class WriteBatch:
    """Writes collected in memory and applied in one transaction"""

    def __init__(self):
        self._ops: List[Tuple[str, tuple]] = []

    def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> "WriteBatch":
        split_document_path(path)
        self._ops.append(("set", (path, data, merge)))
        return self

    def update(self, path: str, fields: Dict[str, Any]) -> "WriteBatch":
        split_document_path(path)
        self._ops.append(("update", (path, fields)))
        return self

    def delete(self, path: str) -> "WriteBatch":
        split_document_path(path)
        self._ops.append(("delete", (path,)))
        return self

    def delete_collection(self, collection: str) -> "WriteBatch":
        normalize_collection_path(collection)
        self._ops.append(("delete_collection", (collection,)))
        return self

    def increment(self, path: str, field: str, amount: float = 1) -> "WriteBatch":
        split_document_path(path)
        self._ops.append(("increment", (path, field, amount)))
        return self

    def __len__(self) -> int:
        return len(self._ops)

    def apply(self, txn: Transaction) -> None:
        for op, args in self._ops:
            getattr(txn, op)(*args)


class DocumentStore:
    """Collections of JSON documents stored in the ``documents`` table"""

    def __init__(self, database: Database):
        self.database = database
        # One shared connection; serialize access to it
        self._lock = threading.RLock()

    def _execute(self, conn: DatabaseConnection, sql: str, params: tuple = ()) -> Any:
        try:
            return execute_query(conn, sql, params, self.database.get_placeholder())
        except Exception as e:
            logger.error(f"Document store query failed: {e}", exc_info=True)
            raise DocumentStoreError(str(e)) from e

    def _connect(self) -> DatabaseConnection:
        try:
            return self.database.connect()
        except Exception as e:
            logger.error(f"Document store connection failed: {e}", exc_info=True)
            raise DocumentStoreError(str(e)) from e

    @contextmanager
    def _transaction(self) -> Iterator[Transaction]:
        with self._lock:
            conn = self._connect()
            self._execute(conn, self.database.adapter.begin_statement())
            try:
                yield Transaction(self, conn)
                self._execute(conn, "COMMIT")
            except BaseException:
                try:
                    execute_query(conn, "ROLLBACK")
                except Exception as e:
                    logger.error(f"Rollback failed: {e}")
                raise

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        """Run fn(txn) in one transaction; any exception rolls back and propagates"""
        with self._transaction() as txn:
            return fn(txn)

    @contextmanager
    def batch(self) -> Iterator[WriteBatch]:
        """Collect writes and apply them atomically when the block exits cleanly"""
        batch = WriteBatch()
        yield batch
        if len(batch):
            self.run_transaction(batch.apply)

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        collection, doc_id = split_document_path(path)
        with self._lock:
            conn = self._connect()
            row = self._execute(
                conn,
                "SELECT data FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
        if row is None:
            return None
        return json.loads(row["data"])

    def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> Dict[str, Any]:
        return self.run_transaction(lambda txn: txn.set(path, data, merge=merge))

    def update(self, path: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.run_transaction(lambda txn: txn.update(path, fields))

    def delete(self, path: str) -> bool:
        return self.run_transaction(lambda txn: txn.delete(path))

    def delete_collection(self, collection: str) -> int:
        return self.run_transaction(lambda txn: txn.delete_collection(collection))

    def increment(self, path: str, field: str, amount: float = 1) -> float:
        return self.run_transaction(lambda txn: txn.increment(path, field, amount))

    def list(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[List[Tuple[str, str]]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Tuple[str, Dict[str, Any]]]:
        """
        List documents of one collection as (doc_id, data) pairs.

        Args:
            collection: Collection path
            where: Equality filters on top-level fields
            order_by: (field, "asc" | "desc") pairs, most significant first;
                      defaults to document id order
            limit: Maximum number of documents returned
            offset: Number of documents skipped after ordering
        """
        collection = normalize_collection_path(collection)
        with self._lock:
            conn = self._connect()
            rows = self._execute(
                conn,
                "SELECT doc_id, data FROM documents WHERE collection = ? ORDER BY doc_id",
                (collection,),
            ).fetchall()

        docs = [(row["doc_id"], json.loads(row["data"])) for row in rows]
        if where:
            docs = [d for d in docs if all(d[1].get(k) == v for k, v in where.items())]
        if order_by:
            docs = _sort_documents(docs, order_by)

        offset = max(offset, 0)
        if limit is not None:
            return docs[offset:offset + limit]
        return docs[offset:]

    def count(self, collection: str) -> int:
        collection = normalize_collection_path(collection)
        with self._lock:
            conn = self._connect()
            row = self._execute(
                conn,
                "SELECT COUNT(*) AS total FROM documents WHERE collection = ?",
                (collection,),
            ).fetchone()
        return int(row["total"]) if row else 0

    def ping(self) -> None:
        """Round-trip a trivial query; raises DocumentStoreError on failure"""
        with self._lock:
            conn = self._connect()
            self._execute(conn, "SELECT 1")
