"""
Shared pytest fixtures.

Most modules use django.test.TestCase classes with the builders in
tests/factories.py; the fixtures below serve the function-style tests.
"""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from tests.factories import make_admin, make_api_key, make_user


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_user(db):
    return make_user()


@pytest.fixture
def admin_user(db):
    return make_admin()


@pytest.fixture
def api_key(client_user):
    return make_api_key(client_user)
