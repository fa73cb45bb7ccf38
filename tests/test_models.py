import pytest
from pydantic import ValidationError

from api_autodoc.models import Capture, ExampleMetadata, ParameterNode, Transaction


class TestTransaction:
    def test_create_minimal_transaction(self):
        tx = Transaction(method="get", path="/users", response_status=200)
        assert tx.method == "GET"
        assert tx.http_version == "HTTP/1.1"
        assert tx.request_body == b""
        assert tx.response_headers == {}

    def test_headers_are_canonicalized(self):
        tx = Transaction(
            method="GET",
            path="/users",
            response_status=200,
            request_headers={"CONTENT_TYPE": "application/json", "x-api-key": "k", "ACCEPT": ""},
        )
        assert tx.request_headers == {"Content-Type": "application/json", "X-Api-Key": "k"}

    def test_content_type_falls_back_to_header(self):
        tx = Transaction(
            method="GET",
            path="/users",
            response_status=200,
            response_headers={"content-type": "application/json"},
        )
        assert tx.response_content_type == "application/json"
        assert tx.request_content_type == ""

    def test_string_bodies_become_bytes(self):
        tx = Transaction(method="POST", path="/users", response_status=201, request_body='{"a": 1}')
        assert tx.request_body == b'{"a": 1}'

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(method="TRACE", path="/", response_status=200)

    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(method="GET", path="", response_status=200)

    def test_transaction_is_frozen(self):
        tx = Transaction(method="GET", path="/users", response_status=200)
        with pytest.raises(ValidationError):
            tx.path = "/other"


class TestParameterNode:
    def test_except_alias(self):
        node = ParameterNode.model_validate({"key": "x", "type": "string", "except": ["guest"]})
        assert node.except_ == ["guest"]

    def test_nested_children_from_dicts(self):
        node = ParameterNode.model_validate({
            "key": "user",
            "type": "hash",
            "children": [{"key": "name", "type": "string", "required": True}],
        })
        assert node.children[0].key == "name"
        assert node.children[0].required is True

    def test_leaf_cannot_have_children(self):
        with pytest.raises(ValidationError):
            ParameterNode(key="x", type="string", children=[ParameterNode(type="string")])

    def test_datetime_and_list_types(self):
        assert ParameterNode(key="at", type="datetime").type == "datetime"
        assert ParameterNode(key="ids", type="list").type == "list"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ParameterNode(key="x", type="uuid")


class TestCapture:
    def test_capture_from_dict(self):
        capture = Capture.model_validate({
            "example": {"description": "lists users", "file_path": "./tests/requests/test_users.py"},
            "transaction": {"method": "GET", "path": "/users", "response_status": 200},
        })
        assert isinstance(capture.example, ExampleMetadata)
        assert capture.example.full_description == ""
        assert capture.description is None
