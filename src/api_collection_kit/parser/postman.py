"""Postman Collection v2.x and Postman environment parser.

Parses exported Postman JSON into a UnifiedCollection. Environments are
recognized before collections because both may carry a top-level list.
"""

import logging

from api_collection_kit.config import MAX_FOLDER_DEPTH
from api_collection_kit.errors import ParseError
from api_collection_kit.models import Folder, Header, Request, UnifiedCollection, Variable, new_id

from .common import model_errors, normalize_method, optional_text, stringify
from .content_type import normalize_json_content_type

logger = logging.getLogger(__name__)


def is_postman_environment(data: dict) -> bool:
    if "_postman_variable_scope" in data:
        return True
    return isinstance(data.get("values"), list) and "item" not in data


def parse_postman(data: dict) -> UnifiedCollection:
    """Parse a Postman collection or environment export."""
    if not isinstance(data, dict):
        raise ParseError("Invalid Postman export: expected a JSON object")

    if is_postman_environment(data):
        with model_errors("Postman environment"):
            return _parse_environment(data)

    info = data.get("info")
    items = data.get("item")
    if not isinstance(info, dict) or not isinstance(items, list):
        raise ParseError("Invalid Postman collection: expected an 'info' object and an 'item' array")

    with model_errors("Postman collection"):
        folders, requests = _parse_items(items)
        pre_request, test = _parse_scripts(data.get("event"))
        collection = UnifiedCollection(
            id=info.get("_postman_id") or new_id(),
            name=info.get("name") or "Postman Collection",
            description=optional_text(info.get("description")),
            variables=_parse_variables(data.get("variable") or []),
            folders=folders,
            requests=requests,
            source_format="postman",
            type="collection",
            pre_request_script=pre_request,
            test_script=test,
        )
    logger.debug(
        "Parsed Postman collection %r: %d folders, %d root requests",
        collection.name, len(folders), len(requests),
    )
    return collection


def _parse_environment(data: dict) -> UnifiedCollection:
    values = data.get("values") or []
    if not isinstance(values, list):
        raise ParseError("Invalid Postman environment: 'values' must be an array")

    return UnifiedCollection(
        id=data.get("_postman_id") or data.get("id") or new_id(),
        name=data.get("name") or "Postman Environment",
        variables=_parse_variables(values),
        source_format="postman",
        type="environment",
    )


def _parse_variables(values: list[dict]) -> list[Variable]:
    return [
        Variable(
            key=stringify(v.get("key")),
            value=stringify(v.get("value")),
            type="secret" if v.get("type") == "secret" else "default",
            description=optional_text(v.get("description")),
            enabled=v.get("enabled") is not False,
        )
        for v in values
        if isinstance(v, dict)
    ]


def _parse_items(items: list[dict], depth: int = 0) -> tuple[list[Folder], list[Request]]:
    """Recursively split items into folders and requests.

    ``depth`` is the folder depth of ``items``. Past ``MAX_FOLDER_DEPTH`` child
    folders are dropped and only requests are kept.
    """
    folders: list[Folder] = []
    requests: list[Request] = []

    for item in items:
        if not isinstance(item, dict):
            continue
        if isinstance(item.get("item"), list):
            if depth >= MAX_FOLDER_DEPTH:
                logger.warning("Folder %r exceeds depth %d, skipped", item.get("name"), MAX_FOLDER_DEPTH)
                continue
            child_folders, child_requests = _parse_items(item["item"], depth + 1)
            pre_request, test = _parse_scripts(item.get("event"))
            folders.append(
                Folder(
                    id=item.get("id") or new_id(),
                    name=item.get("name") or "Folder",
                    description=optional_text(item.get("description")),
                    folders=child_folders,
                    requests=child_requests,
                    pre_request_script=pre_request,
                    test_script=test,
                )
            )
        elif isinstance(item.get("request"), (dict, str)):
            requests.append(_parse_request(item))

    return folders, requests


def _parse_request(item: dict) -> Request:
    req = item["request"]
    if isinstance(req, str):
        # Shorthand form: "request": "https://example.com"
        req = {"method": "GET", "url": req}

    body = _parse_body(req.get("body"))
    headers = [
        Header(
            key=stringify(h.get("key")),
            value=stringify(h.get("value")),
            enabled=not h.get("disabled", False),
        )
        for h in req.get("header") or []
        if isinstance(h, dict)
    ]
    pre_request, test = _parse_scripts(item.get("event"))

    return Request(
        id=item.get("id") or new_id(),
        name=item.get("name") or "Request",
        method=normalize_method(req.get("method")),
        url=_parse_url(req.get("url")),
        headers=normalize_json_content_type(headers, body),
        body=body,
        description=optional_text(item.get("description") or req.get("description")),
        pre_request_script=pre_request,
        test_script=test,
    )


def _parse_url(url) -> str:
    if url is None:
        return ""
    if isinstance(url, str):
        return url
    if not isinstance(url, dict):
        return stringify(url)
    if url.get("raw"):
        return url["raw"]

    # Rebuild from parts when the exporter omitted "raw"
    host = url.get("host") or ""
    if isinstance(host, list):
        host = ".".join(host)
    path = url.get("path") or ""
    if isinstance(path, list):
        path = "/".join(path)
    result = host
    if url.get("protocol"):
        result = f"{url['protocol']}://{result}"
    if url.get("port"):
        result = f"{result}:{url['port']}"
    if path:
        result = f"{result}/{path.lstrip('/')}"
    query = [q for q in url.get("query") or [] if isinstance(q, dict) and not q.get("disabled")]
    if query:
        result += "?" + "&".join(f"{q.get('key', '')}={stringify(q.get('value'))}" for q in query)
    return result


def _parse_body(body) -> str | None:
    if not isinstance(body, dict):
        return None
    raw = body.get("raw")
    if raw is None:
        return None
    return stringify(raw)


def _parse_scripts(events) -> tuple[str | None, str | None]:
    """Extract (pre-request, test) script bodies from an ``event`` array."""
    if not isinstance(events, list):
        return None, None
    return _join_scripts(events, "prerequest"), _join_scripts(events, "test")


def _join_scripts(events: list[dict], listen: str) -> str | None:
    bodies = []
    for event in events:
        if not isinstance(event, dict) or event.get("listen") != listen:
            continue
        script = event.get("script")
        if not isinstance(script, dict):
            continue
        exec_lines = script.get("exec")
        if isinstance(exec_lines, str):
            bodies.append(exec_lines)
        elif isinstance(exec_lines, list):
            bodies.append("\n".join(stringify(line) for line in exec_lines))
    if not bodies:
        return None
    return "\n".join(bodies)
