"""Test configuration and fixtures for NodeQL."""

import os

import pytest
from dotenv import load_dotenv

from nodeql import InMemoryNodeStore, LocalNodeModel, SQLNodeStore
from tests.fixtures import make_nodes
from tests.schema import CALLS, build_schema

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(autouse=True)
def reset_calls():
    CALLS.clear()
    yield
    CALLS.clear()


@pytest.fixture(scope="session")
def schema():
    return build_schema()


@pytest.fixture
def nodes():
    return make_nodes()


@pytest.fixture
def store(nodes):
    return InMemoryNodeStore(nodes)


@pytest.fixture
def sql_store(nodes):
    """SQL-backed store; NODEQL_TEST_DATABASE_URL selects the database (default: in-memory SQLite)."""
    url = os.getenv('NODEQL_TEST_DATABASE_URL') or 'sqlite://'
    sql = SQLNodeStore(url)
    for node in sql.get_nodes():
        sql.delete_node(node['id'])
    for node in nodes:
        sql.add_node(node)
    yield sql
    sql.engine.dispose()


@pytest.fixture
def dependencies():
    return []


@pytest.fixture
def reports():
    return []


@pytest.fixture
def model(schema, store, dependencies, reports):
    return LocalNodeModel(
        schema,
        store,
        create_page_dependency=dependencies.append,
        reporter=reports.append,
    )
