import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from db import Database  # noqa: E402
from repositories import BooksRepository  # noqa: E402
from services.book_service import BookService  # noqa: E402


@pytest.fixture
def database():
    db = Database("sqlite://").open()
    yield db
    db.close()


@pytest.fixture
def repo(database):
    return BooksRepository(database)


@pytest.fixture
def service(repo):
    return BookService(repo)


@pytest.fixture
def client(database):
    from fastapi.testclient import TestClient

    from api.main import create_app

    with TestClient(create_app(database)) as test_client:
        yield test_client
