from api_collection_kit.models import Folder, Header, Request, UnifiedCollection, Variable


class TestVariable:
    def test_defaults(self):
        v = Variable(key="baseUrl")
        assert v.value == ""
        assert v.type == "default"
        assert v.enabled is True
        assert v.description is None
        assert v.id

    def test_ids_are_unique(self):
        assert Variable(key="a").id != Variable(key="a").id


class TestRequest:
    def test_create_minimal_request(self):
        r = Request(name="Ping")
        assert r.method == "GET"
        assert r.headers == []
        assert r.body is None

    def test_accepts_camel_case_aliases(self):
        r = Request(name="Ping", preRequestScript="console.log(1)", testScript="pm.test()")
        assert r.pre_request_script == "console.log(1)"
        assert r.test_script == "pm.test()"


class TestUnifiedCollection:
    def _collection(self) -> UnifiedCollection:
        return UnifiedCollection(
            name="Shop",
            source_format="postman",
            requests=[Request(name="root")],
            folders=[
                Folder(
                    name="a",
                    requests=[Request(name="a1")],
                    folders=[Folder(name="b", requests=[Request(name="b1")])],
                )
            ],
        )

    def test_defaults(self):
        c = UnifiedCollection(name="Empty")
        assert c.version == "1.0"
        assert c.type == "collection"
        assert c.source_format == "unknown"
        assert c.variables == [] and c.folders == [] and c.requests == []

    def test_to_dict_uses_camel_case_and_drops_none(self):
        data = self._collection().to_dict()
        assert data["sourceFormat"] == "postman"
        assert "source_format" not in data
        assert "description" not in data
        assert "preRequestScript" not in data["requests"][0]

    def test_serialization_roundtrip(self):
        c = self._collection()
        c2 = UnifiedCollection.model_validate(c.to_dict())
        assert c2 == c

    def test_iter_requests_walks_every_folder(self):
        names = [r.name for r in self._collection().iter_requests()]
        assert names == ["root", "a1", "b1"]

    def test_iter_requests_respects_depth(self):
        names = [r.name for r in self._collection().iter_requests(max_depth=1)]
        assert names == ["root", "a1"]


class TestHeader:
    def test_disabled_header_kept(self):
        h = Header(key="X-Debug", value="1", enabled=False)
        assert h.to_dict() == {"key": "X-Debug", "value": "1", "enabled": False}
