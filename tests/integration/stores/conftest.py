"""Pytest fixtures for store integration tests.

Tests run against the MongoDB at TEST_MONGODB_URL and skip gracefully
when it is unavailable.
"""

import os
from collections.abc import Iterator
from uuid import uuid4

import pytest
from pymongo import MongoClient
from pymongo.errors import PyMongoError


@pytest.fixture(scope="session")
def mongo_url() -> str:
    """Get MongoDB URL for tests."""
    return os.environ.get("TEST_MONGODB_URL", "mongodb://localhost:27017")


@pytest.fixture(scope="session")
def mongo_client(mongo_url: str) -> Iterator[MongoClient]:
    """Create a MongoDB client for tests.

    Skips tests if MongoDB is not available.
    """
    client: MongoClient = MongoClient(mongo_url, serverSelectionTimeoutMS=1000, tz_aware=True)

    # Verify connection works
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        pytest.skip(f"MongoDB not available at {mongo_url}")

    yield client

    client.close()


@pytest.fixture
def database_name(mongo_client: MongoClient) -> Iterator[str]:
    """A throwaway database per test, dropped afterwards."""
    name = f"mongostore_test_{uuid4().hex[:12]}"
    yield name
    mongo_client.drop_database(name)
