"""pytest integration.

Mark a test with ``@pytest.mark.autodoc("GET /users/:id")`` and hand the
exchange to the ``autodoc`` fixture::

    @pytest.mark.autodoc("GET /users/:id")
    def test_returns_the_user(client, autodoc):
        client.get("/users/1")
        autodoc.record(EmbeddedDriverSource(client))

Documents are written at the end of the session when pytest runs with
``--autodoc`` or the ``AUTODOC`` environment variable is set. Override the
``autodoc_registry`` fixture in ``conftest.py`` to document parameters.
"""

import os
from pathlib import Path

import pytest

from api_autodoc.config import Configuration, load_configuration
from api_autodoc.extract.source import TransactionSource
from api_autodoc.models import ExampleMetadata
from api_autodoc.render.document import Document
from api_autodoc.render.documents import Documents

ENV_FLAG = "AUTODOC"


def pytest_addoption(parser):
    group = parser.getgroup("autodoc")
    group.addoption("--autodoc", action="store_true", default=False, help="Write API documents recorded by tests.")
    group.addoption("--autodoc-config", default=None, help="YAML configuration for api-autodoc.")


def pytest_configure(config):
    config.addinivalue_line("markers", "autodoc(endpoint): document the HTTP exchange recorded by this test")


def autodoc_enabled(config) -> bool:
    return bool(config.getoption("--autodoc") or os.environ.get(ENV_FLAG))


def example_from_node(node) -> ExampleMetadata:
    """Describe a collected test item as an example."""
    function = getattr(node, "function", None)
    doc = function.__doc__ if function is not None else None
    if doc and doc.strip():
        description = doc.strip().splitlines()[0].rstrip(".")
    else:
        description = node.name.split("[", 1)[0].removeprefix("test_").replace("_", " ")

    marker = node.get_closest_marker("autodoc")
    endpoint = marker.args[0] if marker and marker.args else ""
    full_description = f"{endpoint} {description}".strip()

    file_path = node.nodeid.split("::", 1)[0]
    return ExampleMetadata(description=description, full_description=full_description, file_path=f"./{file_path}")


class Recorder:
    """Renders the documents recorded by one test."""

    def __init__(self, document: Document, documents: Documents, example: ExampleMetadata):
        self.document = document
        self.documents = documents
        self.example = example

    def record(self, source: TransactionSource) -> str:
        return self.documents.append(self.document.prepare(source, self.example))


@pytest.fixture(scope="session")
def autodoc_configuration(pytestconfig) -> Configuration:
    config_path = pytestconfig.getoption("--autodoc-config")
    if config_path:
        return load_configuration(Path(config_path))
    return Configuration()


@pytest.fixture(scope="session")
def autodoc_registry():
    return None


@pytest.fixture(scope="session")
def autodoc_documents(pytestconfig, autodoc_configuration):
    documents = Documents(autodoc_configuration)
    yield documents
    if autodoc_enabled(pytestconfig) and len(documents):
        documents.write()


@pytest.fixture
def autodoc(request, autodoc_configuration, autodoc_registry, autodoc_documents) -> Recorder:
    document = Document(autodoc_configuration, autodoc_registry)
    return Recorder(document, autodoc_documents, example_from_node(request.node))
