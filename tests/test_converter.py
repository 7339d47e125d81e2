import json
from pathlib import Path

import pytest

from api_collection_kit.converter import convert_collection, to_postman
from api_collection_kit.errors import UnsupportedFormatError
from api_collection_kit.models import Folder, Request, UnifiedCollection, Variable
from api_collection_kit.parser import parse_collection_file
from api_collection_kit.parser.detect import detect_format
from api_collection_kit.parser.insomnia import parse_insomnia
from api_collection_kit.parser.postman import parse_postman
from api_collection_kit.parser.thunderclient import parse_thunderclient
from api_collection_kit.parser.variables import parse_csv, parse_env

FIXTURES = Path(__file__).parent / "fixtures"


def _postman_fixture() -> UnifiedCollection:
    return parse_collection_file(FIXTURES / "sample.postman_collection.json")


def _variables_collection() -> UnifiedCollection:
    return UnifiedCollection(
        name="Vars",
        type="environment",
        source_format="env",
        variables=[
            Variable(key="API_KEY", value="abc", type="secret", description="Primary key"),
            Variable(key="GREETING", value="hello world"),
            Variable(key="OLD", value="x", enabled=False),
        ],
    )


class TestPostmanConverter:
    def test_output_shape(self):
        data = json.loads(convert_collection(_postman_fixture(), "postman"))
        assert data["info"]["name"] == "Pet Store"
        assert data["info"]["_postman_id"] == "pm-col-001"
        assert "postman" in data["info"]["schema"]
        assert detect_format(data) == "postman"

    def test_requests_before_folders(self):
        data = json.loads(convert_collection(_postman_fixture(), "postman"))
        assert [item["name"] for item in data["item"]] == ["List pets", "Pets"]

    def test_request_fields(self):
        data = json.loads(convert_collection(_postman_fixture(), "postman"))
        request = data["item"][0]["request"]
        assert request["method"] == "GET"
        assert request["url"] == {"raw": "{{baseUrl}}/pets?limit=10"}
        assert request["header"][1] == {"key": "X-Debug", "value": "1", "disabled": True}
        assert "body" not in request

    def test_secret_type_kept(self):
        data = json.loads(convert_collection(_postman_fixture(), "postman"))
        assert [v["type"] for v in data["variable"]] == ["default", "secret", "default"]

    def test_round_trip(self):
        original = _postman_fixture()
        again = parse_postman(json.loads(convert_collection(original, "postman")))

        assert again.name == original.name
        assert again.id == original.id
        assert [(r.name, r.method, r.url) for r in again.iter_requests()] == [
            (r.name, r.method, r.url) for r in original.iter_requests()
        ]
        assert [(r.headers, r.body, r.test_script) for r in again.iter_requests()] == [
            (r.headers, r.body, r.test_script) for r in original.iter_requests()
        ]
        assert [(v.key, v.value) for v in again.variables if v.enabled] == [
            (v.key, v.value) for v in original.variables if v.enabled
        ]
        assert again.pre_request_script == original.pre_request_script
        assert again.test_script == original.test_script
        assert again.folders[0].pre_request_script == original.folders[0].pre_request_script
        assert again.folders[0].folders[0].folders[0].requests[0].name == "Get audit log"

    def test_environment_becomes_postman_environment(self):
        data = json.loads(convert_collection(_variables_collection(), "postman"))
        assert data["_postman_variable_scope"] == "environment"
        assert data["values"][0] == {
            "key": "API_KEY", "value": "abc", "type": "secret", "enabled": True, "description": "Primary key",
        }
        env = parse_postman(data)
        assert env.type == "environment"
        assert len(env.variables) == 3

    def test_depth_limit(self, monkeypatch):
        monkeypatch.setattr("api_collection_kit.converter.common.MAX_FOLDER_DEPTH", 2)
        deep = Folder(name="l1", folders=[Folder(name="l2", folders=[Folder(name="l3")])])
        data = to_postman(UnifiedCollection(name="Deep", folders=[deep]))
        level2 = data["item"][0]["item"][0]
        assert level2["name"] == "l2"
        assert level2["item"] == []


class TestInsomniaConverter:
    def test_export_shape(self):
        data = json.loads(convert_collection(_postman_fixture(), "insomnia"))
        assert data["_type"] == "export"
        assert data["__export_format"] == 4
        assert detect_format(data) == "insomnia"
        assert data["resources"][0]["_type"] == "workspace"
        assert data["resources"][0]["name"] == "Pet Store"

    def test_environment_holds_enabled_variables(self):
        data = json.loads(convert_collection(_postman_fixture(), "insomnia"))
        env = next(r for r in data["resources"] if r["_type"] == "environment")
        assert env["data"] == {"baseUrl": "https://petstore.example.com", "apiKey": "s3cr3t"}

    def test_nested_folders_link_to_new_parent_ids(self):
        data = json.loads(convert_collection(_postman_fixture(), "insomnia"))
        groups = {r["name"]: r for r in data["resources"] if r["_type"] == "request_group"}
        assert set(groups) == {"Pets", "Admin", "Audit"}
        assert groups["Admin"]["parentId"] == groups["Pets"]["_id"]
        assert groups["Audit"]["parentId"] == groups["Admin"]["_id"]

    def test_round_trip_through_insomnia(self):
        again = parse_insomnia(json.loads(convert_collection(_postman_fixture(), "insomnia")))
        assert again.name == "Pet Store"
        assert again.requests[0].name == "List pets"
        assert again.requests[0].headers[1].enabled is False
        assert again.folders[0].folders[0].folders[0].requests[0].name == "Get audit log"

    def test_postman_scripts_translated(self):
        data = json.loads(convert_collection(_postman_fixture(), "insomnia"))
        pets = next(r for r in data["resources"] if r.get("name") == "Pets")
        assert pets["preRequestScript"] == "insomnia.environment.set(\"token\", 'abc');"

    def test_insomnia_scripts_translated_to_postman(self):
        collection = parse_collection_file(FIXTURES / "sample.insomnia.json")
        data = json.loads(convert_collection(collection, "postman"))
        users = next(item for item in data["item"] if item["name"] == "Users")
        assert users["event"][0]["script"]["exec"] == ['pm.test("ok", () => {});']
        create = users["item"][0]
        assert create["event"][0]["script"]["exec"] == ["pm.expect(pm.response.code).to.equal(201);"]


class TestThunderClientConverter:
    def test_collection_shape(self):
        data = json.loads(convert_collection(_postman_fixture(), "thunderclient"))
        assert data["colName"] == "Pet Store"
        assert detect_format(data) == "thunderclient"
        assert len(data["folders"]) == 3
        assert len(data["requests"]) == 3
        assert all(r["colId"] == data["_id"] for r in data["requests"])

    def test_headers_use_active(self):
        data = json.loads(convert_collection(_postman_fixture(), "thunderclient"))
        assert data["requests"][0]["headers"][1] == {"name": "X-Debug", "value": "1", "active": False}

    def test_test_script_translated(self):
        data = json.loads(convert_collection(_postman_fixture(), "thunderclient"))
        assert data["requests"][0]["tests"] == ["tc.expect(tc.response.status).to.eql(200);"]

    def test_round_trip_keeps_nesting(self):
        again = parse_thunderclient(json.loads(convert_collection(_postman_fixture(), "thunderclient")))
        assert [r.name for r in again.requests] == ["List pets"]
        assert again.folders[0].name == "Pets"
        assert again.folders[0].requests[0].name == "Create pet"
        assert again.folders[0].folders[0].folders[0].requests[0].name == "Get audit log"


class TestVariableConverters:
    def test_env(self):
        text = convert_collection(_variables_collection(), "env")
        assert text == '# Primary key\nAPI_KEY=abc\nGREETING="hello world"'

    def test_env_round_trip(self):
        env = parse_env(convert_collection(_variables_collection(), "env"))
        assert [(v.key, v.value) for v in env.variables] == [("API_KEY", "abc"), ("GREETING", "hello world")]

    def test_env_escapes_quotes_and_newlines(self):
        collection = UnifiedCollection(
            name="Tricky",
            type="environment",
            variables=[
                Variable(key="A", value="line1\nline2"),
                Variable(key="B", value='"q"'),
                Variable(key="C", value="'single'"),
                Variable(key="D", value='C:\\my dir\\'),
                Variable(key="E", value="plain\\path"),
            ],
        )
        text = convert_collection(collection, "env")
        assert text.split("\n")[0] == 'A="line1\\nline2"'
        env = parse_env(text)
        assert [(v.key, v.value) for v in env.variables] == [(v.key, v.value) for v in collection.variables]

    def test_env_multiline_description_stays_a_comment(self):
        collection = UnifiedCollection(
            name="Docs",
            type="environment",
            variables=[Variable(key="A", value="1", description="first\nB=2")],
        )
        text = convert_collection(collection, "env")
        assert text == "# first B=2\nA=1"
        assert [v.key for v in parse_env(text).variables] == ["A"]

    def test_csv(self):
        text = convert_collection(_variables_collection(), "csv")
        lines = text.split("\n")
        assert lines[0] == "key,value,type,description,enabled"
        assert lines[1] == '"API_KEY","abc","secret","Primary key","true"'
        assert lines[3] == '"OLD","x","default","","false"'

    def test_csv_round_trip(self):
        csv_collection = parse_csv(convert_collection(_variables_collection(), "csv"))
        assert [(v.key, v.type, v.enabled) for v in csv_collection.variables] == [
            ("API_KEY", "secret", True),
            ("GREETING", "default", True),
            ("OLD", "default", False),
        ]

    def test_json_only_enabled(self):
        data = json.loads(convert_collection(_variables_collection(), "json"))
        assert data == {"API_KEY": "abc", "GREETING": "hello world"}


class TestConvertCollection:
    def test_unsupported_target(self):
        with pytest.raises(UnsupportedFormatError, match="unknown"):
            convert_collection(_variables_collection(), "unknown")

    @pytest.mark.parametrize("target", ["postman", "insomnia", "thunderclient", "json"])
    def test_json_targets_always_valid(self, target):
        collection = UnifiedCollection(
            name="Odd",
            requests=[Request(name="r", body="not json", description="d")],
            folders=[Folder(name="empty")],
        )
        assert isinstance(json.loads(convert_collection(collection, target)), dict)

    def test_public_names_resolve(self):
        import api_collection_kit.converter as converter

        assert all(hasattr(converter, name) for name in converter.__all__)

    def test_does_not_mutate_input(self):
        collection = _postman_fixture()
        before = collection.model_dump()
        for target in ("postman", "insomnia", "thunderclient", "env", "csv", "json"):
            convert_collection(collection, target)
        assert collection.model_dump() == before
