import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import main


@pytest.fixture
def mock_db(monkeypatch):
    mdb = mongomock.MongoClient()[database.DATABASE_NAME]
    monkeypatch.setattr(database, "db", mdb)
    monkeypatch.setattr(main, "db", mdb)
    return mdb


@pytest.fixture
def client(mock_db):
    return TestClient(main.app)


@pytest.fixture
def classes(mock_db):
    docs = [
        {"name": "Spanish A1", "instructorEmail": "ana@lingua.io", "status": "approved", "availableSeats": 12},
        {"name": "French B2", "instructorEmail": "luc@lingua.io", "status": "approved", "availableSeats": 3},
        {"name": "German A2", "instructorEmail": "ana@lingua.io", "status": "pending", "availableSeats": 1},
        {"name": "Japanese N5", "instructorEmail": "ken@lingua.io", "status": "denied", "availableSeats": 8},
    ]
    mock_db[database.CLASSES].insert_many(docs)
    return docs


class StaleReads:
    """Serves lookups on one collection as if a concurrent insert has not landed yet."""

    def __init__(self, real_db, collection_name):
        self._db = real_db
        self._name = collection_name

    def __getitem__(self, name):
        coll = self._db[name]
        if name == self._name:
            return _NeverFound(coll)
        return coll


class _NeverFound:
    def __init__(self, coll):
        self._coll = coll

    def find_one(self, *args, **kwargs):
        return None

    def __getattr__(self, attr):
        return getattr(self._coll, attr)


@pytest.fixture
def stale_reads(mock_db, monkeypatch):
    def apply(collection_name):
        monkeypatch.setattr(main, "db", StaleReads(mock_db, collection_name))
    return apply
