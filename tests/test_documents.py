from api_autodoc.config import Configuration
from api_autodoc.extract.source import PrebuiltTransactionSource
from api_autodoc.models import ExampleMetadata, Transaction
from api_autodoc.render.document import Document
from api_autodoc.render.documents import Documents


def _prepare(document: Document, method: str, path: str, file_path: str):
    tx = Transaction(method=method, path=path, response_status=200)
    example = ExampleMetadata(description="works", file_path=file_path)
    return document.prepare(PrebuiltTransactionSource(tx), example)


class TestDocuments:
    def test_groups_by_pathname(self, tmp_path):
        config = Configuration(template="## $title\n", output_root=tmp_path)
        document = Document(config)
        documents = Documents(config)
        documents.append(_prepare(document, "GET", "/users", "./tests/requests/test_users.py"))
        documents.append(_prepare(document, "POST", "/users", "./tests/requests/test_users.py"))
        documents.append(_prepare(document, "GET", "/items", "./tests/requests/test_items.py"))

        written = documents.write()

        assert written == [tmp_path / "users.md", tmp_path / "items.md"]
        assert (tmp_path / "users.md").read_text(encoding="utf-8") == "## GET /users\n\n## POST /users\n"
        assert (tmp_path / "items.md").read_text(encoding="utf-8") == "## GET /items\n"
        assert not (tmp_path / "toc.md").exists()

    def test_table_of_contents(self, tmp_path):
        config = Configuration(template="## $title\n", output_root=tmp_path, toc=True)
        document = Document(config)
        documents = Documents(config)
        documents.append(_prepare(document, "GET", "/users", "./tests/requests/test_users.py"))
        documents.append(_prepare(document, "GET", "/users", "./tests/requests/test_users.py"))
        documents.append(_prepare(document, "GET", "/items", "./tests/requests/admin/test_items.py"))

        documents.write()

        assert (tmp_path / "toc.md").read_text(encoding="utf-8") == (
            "## Table of Contents\n"
            "* [GET /users](users.md#get-users)\n"
            "* [GET /items](admin/items.md#get-items)\n"
        )

    def test_append_returns_markdown(self, tmp_path):
        config = Configuration(template="$method", output_root=tmp_path)
        documents = Documents(config)
        assert documents.append(_prepare(Document(config), "DELETE", "/users/1", "./tests/requests/test_users.py")) == "DELETE"
        assert len(documents) == 1

    def test_nothing_to_write(self, tmp_path):
        documents = Documents(Configuration(output_root=tmp_path, toc=True))
        assert documents.write() == []
