import json
from pathlib import Path

import pytest

from api_collection_kit.errors import ParseError
from api_collection_kit.parser import parse_collection_file
from api_collection_kit.parser.insomnia import parse_insomnia

FIXTURES = Path(__file__).parent / "fixtures"


def _load(name: str) -> dict:
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


class TestInsomniaParser:
    def test_workspace_metadata(self):
        c = parse_insomnia(_load("sample.insomnia.json"))
        assert c.id == "wrk_1"
        assert c.name == "Test Workspace"
        assert c.description is None
        assert c.source_format == "insomnia"
        assert c.type == "collection"
        assert c.pre_request_script == 'insomnia.environment.set("ts", Date.now());'

    def test_environment_flattened_into_variables(self):
        c = parse_insomnia(_load("sample.insomnia.json"))
        assert [(v.key, v.value) for v in c.variables] == [
            ("apiUrl", "https://api.example.com"),
            ("timeout", "30"),
        ]
        assert all(v.type == "default" for v in c.variables)

    def test_root_requests(self):
        c = parse_insomnia(_load("sample.insomnia.json"))
        assert [r.name for r in c.requests] == ["Health"]
        assert c.requests[0].id == "req_1"

    def test_folder_tree(self):
        c = parse_insomnia(_load("sample.insomnia.json"))
        users = c.folders[0]
        assert users.id == "fld_1"
        assert users.name == "Users"
        assert users.test_script == 'insomnia.test("ok", () => {});'
        assert users.folders[0].name == "Admin"
        assert users.folders[0].requests[0].name == "Delete user"
        assert users.folders[0].requests[0].method == "DELETE"

    def test_request_fields(self):
        c = parse_insomnia(_load("sample.insomnia.json"))
        req = c.folders[0].requests[0]
        assert req.method == "POST"
        assert req.body == '{"name": "Ada"}'
        assert req.test_script == "insomnia.expect(insomnia.response.status).to.equal(201);"
        assert req.headers[0].key == "X-Trace"
        assert req.headers[0].enabled is False
        assert req.headers[1].key == "Content-Type"
        assert req.headers[1].value == "application/json"

    def test_environment_only_export(self):
        c = parse_insomnia({
            "_type": "export",
            "__export_format": 4,
            "resources": [
                {"_id": "wrk", "_type": "workspace", "name": "Env"},
                {"_id": "env", "_type": "environment", "parentId": "wrk", "data": {"a": "1"}},
            ],
        })
        assert c.type == "environment"

    def test_missing_workspace_uses_defaults(self):
        c = parse_insomnia({
            "_type": "export",
            "__export_format": 4,
            "resources": [{"_id": "req", "_type": "request", "url": "x"}],
        })
        assert c.name == "Insomnia Collection"
        assert c.requests[0].name == "Request"
        assert c.requests[0].method == "GET"

    def test_cyclic_parents_do_not_recurse(self):
        c = parse_insomnia({
            "_type": "export",
            "__export_format": 4,
            "resources": [
                {"_id": "wrk", "_type": "workspace", "name": "W"},
                {"_id": "a", "_type": "request_group", "parentId": "b", "name": "A"},
                {"_id": "b", "_type": "request_group", "parentId": "a", "name": "B"},
            ],
        })
        assert c.folders == []

    def test_missing_resources_raises(self):
        with pytest.raises(ParseError, match="resources"):
            parse_insomnia({"_type": "export", "__export_format": 4})

    def test_yaml_export(self):
        c = parse_collection_file(FIXTURES / "sample.insomnia.yaml")
        assert c.source_format == "insomnia"
        assert c.name == "YAML Workspace"
        assert c.requests[0].url == "https://example.com/ping"

    def test_non_string_name_raises_parse_error(self):
        with pytest.raises(ParseError, match="Invalid Insomnia export: name"):
            parse_insomnia({
                "_type": "export",
                "__export_format": 4,
                "resources": [{"_id": "req_1", "_type": "request", "name": 123, "url": "u"}],
            })
