"""Shared fixtures: an in-memory Firestore stand-in and canned HTTP responses."""
from collections import defaultdict
from unittest.mock import MagicMock

import pytest
import requests

from job_feeds import config


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, db, collection, doc_id):
        self.db = db
        self.collection = collection
        self.id = doc_id

    def get(self):
        if self.id in self.db.fail_get_ids:
            raise RuntimeError(f"read failed for {self.id}")
        return FakeSnapshot(self, self.db.data[self.collection].get(self.id))


class FakeQuery:
    def __init__(self, db, collection, field, direction, skip=0):
        self.db = db
        self.collection = collection
        self.field = field
        self.direction = direction
        self.skip = skip

    def offset(self, count):
        return FakeQuery(self.db, self.collection, self.field, self.direction, count)

    def stream(self):
        docs = self.db.data[self.collection]
        ordered = sorted(
            docs.items(),
            key=lambda item: item[1].get(self.field, ""),
            reverse=self.direction == "DESCENDING",
        )
        for doc_id, data in ordered[self.skip:]:
            yield FakeSnapshot(FakeDocument(self.db, self.collection, doc_id), data)


class FakeCollection:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def document(self, doc_id):
        return FakeDocument(self.db, self.name, doc_id)

    def order_by(self, field, direction="ASCENDING"):
        return FakeQuery(self.db, self.name, field, direction)


class FakeBatch:
    def __init__(self, db):
        self.db = db
        self.operations = []

    def set(self, reference, data, merge=False):
        self.operations.append(("set", reference, dict(data), merge))

    def delete(self, reference):
        self.operations.append(("delete", reference, None, False))

    def commit(self):
        self.db.commits += 1
        if self.db.fail_commit:
            raise RuntimeError("commit rejected")
        for action, reference, data, merge in self.operations:
            docs = self.db.data[reference.collection]
            if action == "delete":
                docs.pop(reference.id, None)
            elif merge and reference.id in docs:
                docs[reference.id].update(data)
            else:
                docs[reference.id] = data


class FakeFirestore:
    """The subset of ``google.cloud.firestore.Client`` the store writer touches."""

    def __init__(self):
        self.data = defaultdict(dict)
        self.commits = 0
        self.fail_commit = False
        self.fail_get_ids = set()

    def collection(self, name):
        return FakeCollection(self, name)

    def batch(self):
        return FakeBatch(self)

    def jobs(self):
        return self.data[config.FIREBASE_COLLECTION]


@pytest.fixture
def fake_db():
    return FakeFirestore()


def make_response(json_data=None, status=200, content=b""):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = json_data
    resp.iter_content.return_value = [content] if content else []
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error", response=resp)
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def respond():
    return make_response


@pytest.fixture(autouse=True)
def default_source_toggles(monkeypatch):
    monkeypatch.setattr(config, "ENABLED_SOURCES", [])
    monkeypatch.setattr(config, "DISABLED_SOURCES", [])
