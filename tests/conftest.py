import copy
import os
from types import SimpleNamespace

os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')
os.environ.setdefault('EMAIL_USER', '')
os.environ.setdefault('EMAIL_PASS', '')

import pytest  # noqa: E402
from bson import ObjectId  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from pymongo import ReturnDocument  # noqa: E402
from pymongo.errors import DuplicateKeyError  # noqa: E402

from course_catalog.core.database import get_db  # noqa: E402
from course_catalog.core.security import hash_password  # noqa: E402
from course_catalog.main import app  # noqa: E402


def _matches(doc: dict, query: dict) -> bool:
    for field, expected in query.items():
        actual = doc.get(field)
        if isinstance(expected, dict) and '$ne' in expected:
            if isinstance(actual, list):
                if expected['$ne'] in actual:
                    return False
            elif actual == expected['$ne']:
                return False
        elif isinstance(expected, dict) and '$in' in expected:
            if actual not in expected['$in']:
                return False
        elif isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


def _apply_update(doc: dict, update: dict) -> None:
    for field, value in update.get('$set', {}).items():
        doc[field] = value
    for field in update.get('$unset', {}):
        doc.pop(field, None)
    for field, value in update.get('$push', {}).items():
        doc.setdefault(field, []).append(value)


class _FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc


class FakeCollection:
    """In-memory stand-in for the motor collection calls the routes make."""

    def __init__(self, unique_fields=()):
        self.docs = []
        self.unique_fields = unique_fields

    def _first(self, query):
        return next((doc for doc in self.docs if _matches(doc, query)), None)

    async def create_index(self, field, unique=False):
        return field

    async def find_one(self, query):
        doc = self._first(query)
        return copy.deepcopy(doc) if doc else None

    def find(self, query):
        return _FakeCursor([copy.deepcopy(doc) for doc in self.docs if _matches(doc, query)])

    async def insert_one(self, doc):
        for field in self.unique_fields:
            if self._first({field: doc.get(field)}):
                raise DuplicateKeyError(f'E11000 duplicate key error: {field}')
        doc.setdefault('_id', ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc['_id'])

    async def insert_many(self, docs):
        inserted = [(await self.insert_one(doc)).inserted_id for doc in docs]
        return SimpleNamespace(inserted_ids=inserted)

    async def update_one(self, query, update):
        doc = self._first(query)
        if doc is None:
            return SimpleNamespace(matched_count=0, modified_count=0)
        _apply_update(doc, update)
        return SimpleNamespace(matched_count=1, modified_count=1)

    async def find_one_and_update(self, query, update, return_document=ReturnDocument.BEFORE):
        doc = self._first(query)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        _apply_update(doc, update)
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query):
        doc = self._first(query)
        if doc is None:
            return SimpleNamespace(deleted_count=0)
        self.docs.remove(doc)
        return SimpleNamespace(deleted_count=1)

    async def delete_many(self, query):
        remaining = [doc for doc in self.docs if not _matches(doc, query)]
        deleted = len(self.docs) - len(remaining)
        self.docs = remaining
        return SimpleNamespace(deleted_count=deleted)


class FakeDatabase:
    def __init__(self):
        self.users = FakeCollection(unique_fields=('email',))
        self.courses = FakeCollection()


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def client(db: FakeDatabase):
    # Not entered as a context manager, so the lifespan never opens a real connection.
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_header(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


def login(client: TestClient, email: str, password: str, role: str) -> str:
    response = client.post('/api/auth/login', json={'email': email, 'password': password, 'role': role})
    assert response.status_code == 200, response.text
    return response.json()['token']


@pytest.fixture
def student_token(client: TestClient) -> str:
    response = client.post('/api/auth/register', json={'email': 'student@example.com', 'password': 'pw123'})
    assert response.status_code == 201
    return login(client, 'student@example.com', 'pw123', 'student')


@pytest.fixture
def admin_token(client: TestClient, db: FakeDatabase) -> str:
    db.users.docs.append({
        '_id': ObjectId(),
        'email': 'admin@example.com',
        'hashed_password': hash_password('adminpass'),
        'role': 'admin',
        'enrolled_courses': [],
    })
    return login(client, 'admin@example.com', 'adminpass', 'admin')


@pytest.fixture
def course_id(db: FakeDatabase) -> str:
    oid = ObjectId()
    db.courses.docs.append({'_id': oid, 'title': 'Intro to React', 'description': 'Components and state.', 'icon': 'Laptop'})
    return str(oid)
