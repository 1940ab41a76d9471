"""
backend/tests/_fake_mongo.py

Purpose:
    Minimal in-memory stand-in for the motor collections used by the health
    tracker and toggle service: equality, $lt/$lte/$gt/$gte/$ne and $or
    filters; $set/$inc/$setOnInsert updates with upsert.
"""

from __future__ import annotations

from types import SimpleNamespace

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

_MISSING = object()


def _cmp(actual, op: str, expected) -> bool:
    if op == "$ne":
        return actual != expected
    if actual is None:
        return False
    if op == "$lt":
        return actual < expected
    if op == "$lte":
        return actual <= expected
    if op == "$gt":
        return actual > expected
    if op == "$gte":
        return actual >= expected
    raise NotImplementedError(op)


def _match(doc: dict, query: dict) -> bool:
    for key, value in query.items():
        if key == "$or":
            if not any(_match(doc, sub) for sub in value):
                return False
            continue
        actual = doc.get(key)
        if isinstance(value, dict) and value and all(k.startswith("$") for k in value):
            if not all(_cmp(actual, op, expected) for op, expected in value.items()):
                return False
        elif actual != value:
            return False
    return True


def _project(doc: dict, projection) -> dict:
    if not projection:
        return dict(doc)
    out = {"_id": doc.get("_id")}
    out.update({k: doc[k] for k in projection if k in doc})
    return out


class _Cursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs

    async def to_list(self, length=None):
        return list(self._docs if length is None else self._docs[:length])


class FakeCollection:
    def __init__(self):
        self.docs: list[dict] = []
        self.fail = False
        self.calls: list[str] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise PyMongoError("fake store down")

    def _apply(self, doc: dict, update: dict) -> None:
        doc.update(update.get("$set", {}))
        for key, amount in update.get("$inc", {}).items():
            doc[key] = (doc.get(key) or 0) + amount

    def _insert(self, query: dict, update: dict) -> dict:
        doc = {k: v for k, v in query.items() if not k.startswith("$") and not isinstance(v, dict)}
        doc.update(update.get("$setOnInsert", {}))
        self._apply(doc, update)
        self.docs.append(doc)
        return doc

    async def find_one(self, query, projection=None):
        self._check("find_one")
        for doc in self.docs:
            if _match(doc, query):
                return _project(doc, projection)
        return None

    def find(self, query=None, projection=None):
        self._check("find")
        return _Cursor([_project(doc, projection) for doc in self.docs if _match(doc, query or {})])

    async def update_one(self, query, update, upsert=False):
        self._check("update_one")
        for doc in self.docs:
            if _match(doc, query):
                self._apply(doc, update)
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            doc = self._insert(query, update)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc.get("_id"))
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def find_one_and_update(self, query, update, upsert=False, return_document=ReturnDocument.BEFORE):
        self._check("find_one_and_update")
        for doc in self.docs:
            if _match(doc, query):
                before = dict(doc)
                self._apply(doc, update)
                return dict(doc) if return_document == ReturnDocument.AFTER else before
        if upsert:
            doc = self._insert(query, update)
            return dict(doc) if return_document == ReturnDocument.AFTER else None
        return None

    async def delete_one(self, query):
        self._check("delete_one")
        for idx, doc in enumerate(self.docs):
            if _match(doc, query):
                del self.docs[idx]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDb:
    def __init__(self):
        self.provider_health = FakeCollection()
        self.provider_toggles = FakeCollection()
