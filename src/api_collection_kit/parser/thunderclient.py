"""Thunder Client collection parser.

Folders may embed their own ``requests`` list, and requests or folders may
also point at a parent folder through ``containerId``. Both forms are read.
"""

import logging

from api_collection_kit.config import MAX_FOLDER_DEPTH
from api_collection_kit.errors import ParseError
from api_collection_kit.models import Folder, Header, Request, UnifiedCollection, new_id

from .common import model_errors, normalize_method, optional_text, stringify
from .content_type import normalize_json_content_type

logger = logging.getLogger(__name__)


def parse_thunderclient(data: dict) -> UnifiedCollection:
    """Parse a Thunder Client collection export."""
    if not isinstance(data, dict) or not isinstance(data.get("requests"), list):
        raise ParseError("Invalid Thunder Client collection: expected 'colName' and a 'requests' array")

    with model_errors("Thunder Client collection"):
        return _build_collection(data)


def _build_collection(data: dict) -> UnifiedCollection:
    folders = [f for f in data.get("folders") or [] if isinstance(f, dict)]
    requests = [r for r in data["requests"] if isinstance(r, dict)]
    folder_ids = {f.get("_id") for f in folders if f.get("_id")}

    def parent_of(resource: dict) -> str | None:
        container = resource.get("containerId")
        return container if container in folder_ids else None

    def build(folder: dict, depth: int, seen: frozenset) -> Folder:
        folder_id = folder.get("_id") or new_id()
        embedded = [r for r in folder.get("requests") or [] if isinstance(r, dict)]
        linked = [r for r in requests if parent_of(r) == folder_id]

        children: list[Folder] = []
        if depth >= MAX_FOLDER_DEPTH:
            logger.warning("Folder %r exceeds depth %d, children dropped", folder.get("name"), MAX_FOLDER_DEPTH)
        else:
            for child in folders:
                child_id = child.get("_id")
                if parent_of(child) == folder_id and child_id not in seen:
                    children.append(build(child, depth + 1, seen | {child_id}))

        return Folder(
            id=folder_id,
            name=folder.get("name") or "Folder",
            requests=[_parse_request(r) for r in embedded + linked],
            folders=children,
        )

    root_folders = [
        build(f, 1, frozenset({f.get("_id")}))
        for f in folders
        if parent_of(f) is None
    ]

    collection = UnifiedCollection(
        id=data.get("_id") or new_id(),
        name=data.get("colName") or "Thunder Client Collection",
        folders=root_folders,
        requests=[_parse_request(r) for r in requests if parent_of(r) is None],
        source_format="thunderclient",
        type="collection",
    )
    logger.debug("Parsed Thunder Client collection %r: %d folders", collection.name, len(root_folders))
    return collection


def _parse_request(resource: dict) -> Request:
    body = resource.get("body")
    raw = body.get("raw") if isinstance(body, dict) else None
    if raw is not None:
        raw = stringify(raw)
    headers = [
        Header(
            key=stringify(h.get("name")),
            value=stringify(h.get("value")),
            enabled=h.get("active") is not False,
        )
        for h in resource.get("headers") or []
        if isinstance(h, dict)
    ]
    tests = resource.get("tests")
    test_script = None
    if isinstance(tests, list):
        scripts = [t for t in tests if isinstance(t, str)]
        test_script = "\n".join(scripts) if scripts else None

    return Request(
        id=resource.get("_id") or new_id(),
        name=resource.get("name") or "Request",
        method=normalize_method(resource.get("method")),
        url=stringify(resource.get("url")),
        headers=normalize_json_content_type(headers, raw),
        body=raw,
        description=optional_text(resource.get("description")),
        test_script=test_script,
    )
