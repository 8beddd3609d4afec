"""Document store over the ``document`` table.

Collections hold JSON documents keyed by id. Writes are last-write-wins per
document, and subscribers always receive the full current state (never a
delta) right after subscribing and after every committed change.
"""
import copy
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from squares.exceptions import StoreUnavailable
from squares.models import Document


class _ServerTimestamp:
    def __repr__(self):
        return 'SERVER_TIMESTAMP'


# Placeholder replaced by the store's own clock when the document is written
SERVER_TIMESTAMP = _ServerTimestamp()


def deep_merge(base: dict, patch: dict) -> dict:
    """Return ``base`` with ``patch`` merged in; nested mappings merge key by key."""
    merged = copy.deepcopy(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _resolve_server_values(value, timestamp: str):
    if value is SERVER_TIMESTAMP:
        return timestamp
    if isinstance(value, dict):
        return {k: _resolve_server_values(v, timestamp) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_resolve_server_values(v, timestamp) for v in value]
    return value


class DocumentStore:
    def __init__(self, db):
        self._db = db
        self._collection_subscribers: Dict[str, list] = defaultdict(list)
        self._document_subscribers: Dict[tuple, list] = defaultdict(list)
        self._pending = None

    # ---- reads ----

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            doc = Document.query.filter_by(collection=collection, doc_id=doc_id).first()
        except SQLAlchemyError as exc:
            self._fail('get', f"{collection}/{doc_id}", exc)
        return copy.deepcopy(doc.data) if doc is not None else None

    def get_all(self, collection: str) -> Dict[str, dict]:
        try:
            docs = Document.query.filter_by(collection=collection).all()
        except SQLAlchemyError as exc:
            self._fail('get_all', collection, exc)
        return {d.doc_id: copy.deepcopy(d.data) for d in docs}

    # ---- writes ----

    def put(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        now = datetime.now(timezone.utc)
        payload = _resolve_server_values(data, now.isoformat())
        try:
            self._write(collection, doc_id, payload, merge, now)
        except IntegrityError:
            # Someone inserted the same document first; this write lands on top of it
            self._db.session.rollback()
            try:
                self._write(collection, doc_id, payload, merge, now)
            except SQLAlchemyError as exc:
                self._fail('put', f"{collection}/{doc_id}", exc)
        except SQLAlchemyError as exc:
            self._fail('put', f"{collection}/{doc_id}", exc)
        self._notify(collection, doc_id)

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            Document.query.filter_by(collection=collection, doc_id=doc_id).delete()
            self._db.session.commit()
        except SQLAlchemyError as exc:
            self._fail('delete', f"{collection}/{doc_id}", exc)
        self._notify(collection, doc_id)

    def _write(self, collection, doc_id, payload, merge, now):
        doc = Document.query.filter_by(collection=collection, doc_id=doc_id).first()
        if doc is None:
            doc = Document(collection=collection, doc_id=doc_id, data=payload)
        elif merge:
            # Assign a new dict so the JSON column sees the change
            doc.data = deep_merge(doc.data or {}, payload)
        else:
            doc.data = payload
        doc.updated_at = now
        self._db.session.add(doc)
        self._db.session.commit()

    def _fail(self, op: str, target: str, exc: Exception):
        self._db.session.rollback()
        current_app.logger.error(f"[store-{op}] {target} failed: {exc}", exc_info=True)
        raise StoreUnavailable() from exc

    # ---- change feed ----

    def subscribe_collection(self, collection: str, callback: Callable[[Dict[str, dict]], None]) -> Callable[[], None]:
        snapshot = self.get_all(collection)
        subscribers = self._collection_subscribers[collection]
        subscribers.append(callback)
        self._deliver(callback, snapshot)
        return lambda: subscribers.remove(callback) if callback in subscribers else None

    def subscribe_document(self, collection: str, doc_id: str, callback: Callable[[Optional[dict]], None]) -> Callable[[], None]:
        document = self.get(collection, doc_id)
        subscribers = self._document_subscribers[(collection, doc_id)]
        subscribers.append(callback)
        self._deliver(callback, document)
        return lambda: subscribers.remove(callback) if callback in subscribers else None

    @contextmanager
    def batched(self):
        """Hold notifications until the block exits, then send one snapshot per target."""
        if self._pending is not None:
            yield
            return
        self._pending = []
        try:
            yield
        finally:
            pending, self._pending = self._pending, None
            for collection in dict.fromkeys(c for c, _ in pending):
                self._publish_collection(collection)
            for collection, doc_id in dict.fromkeys(pending):
                self._publish_document(collection, doc_id)

    def _notify(self, collection: str, doc_id: str) -> None:
        if self._pending is not None:
            self._pending.append((collection, doc_id))
            return
        self._publish_collection(collection)
        self._publish_document(collection, doc_id)

    def _publish_collection(self, collection: str) -> None:
        if not self._collection_subscribers.get(collection):
            return
        try:
            snapshot = self.get_all(collection)
        except StoreUnavailable:
            # The write is committed; subscribers catch up on the next change or refresh
            current_app.logger.warning(f"[store-notify] {collection} snapshot unavailable")
            return
        for callback in list(self._collection_subscribers[collection]):
            self._deliver(callback, snapshot)

    def _publish_document(self, collection: str, doc_id: str) -> None:
        if not self._document_subscribers.get((collection, doc_id)):
            return
        try:
            document = self.get(collection, doc_id)
        except StoreUnavailable:
            current_app.logger.warning(f"[store-notify] {collection}/{doc_id} snapshot unavailable")
            return
        for callback in list(self._document_subscribers[(collection, doc_id)]):
            self._deliver(callback, document)

    def _deliver(self, callback, snapshot) -> None:
        try:
            callback(snapshot)
        except Exception as exc:
            current_app.logger.error(f"[store-notify] subscriber {callback!r} failed: {exc}", exc_info=True)
