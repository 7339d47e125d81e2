"""Serialize a UnifiedCollection as a Postman Collection v2.1 or environment."""

from api_collection_kit.config import POSTMAN_SCHEMA_URL
from api_collection_kit.models import Folder, Request, UnifiedCollection, Variable

from .common import child_folders, compact
from .scripts import translate_script


def to_postman(collection: UnifiedCollection) -> dict:
    """Build a Postman collection dict. Requests precede folders within each level."""
    if collection.type == "environment":
        return to_postman_environment(collection)

    source = collection.source_format

    def events(entity) -> list[dict] | None:
        result = []
        for listen, script in (
            ("prerequest", entity.pre_request_script),
            ("test", entity.test_script),
        ):
            if script:
                script = translate_script(script, source, "postman")
                result.append({
                    "listen": listen,
                    "script": {"exec": script.split("\n"), "type": "text/javascript"},
                })
        return result or None

    def request_item(request: Request) -> dict:
        return compact({
            "name": request.name,
            "request": compact({
                "method": request.method,
                "header": [
                    {"key": h.key, "value": h.value, "disabled": not h.enabled}
                    for h in request.headers
                ],
                "url": {"raw": request.url},
                "body": {"mode": "raw", "raw": request.body} if request.body else None,
            }),
            "description": request.description,
            "event": events(request),
        })

    def folder_item(folder: Folder, depth: int) -> dict:
        return compact({
            "name": folder.name,
            "description": folder.description,
            "event": events(folder),
            "item": [request_item(r) for r in folder.requests]
            + [folder_item(f, depth + 1) for f in child_folders(folder, depth)],
        })

    return compact({
        "info": compact({
            "_postman_id": collection.id,
            "name": collection.name,
            "description": collection.description,
            "schema": POSTMAN_SCHEMA_URL,
        }),
        "variable": [_variable(v) for v in collection.variables],
        "event": events(collection),
        "item": [request_item(r) for r in collection.requests]
        + [folder_item(f, 1) for f in collection.folders],
    })


def to_postman_environment(collection: UnifiedCollection) -> dict:
    return {
        "id": collection.id,
        "name": collection.name,
        "values": [_variable(v) for v in collection.variables],
        "_postman_variable_scope": "environment",
    }


def _variable(variable: Variable) -> dict:
    return compact({
        "key": variable.key,
        "value": variable.value,
        "type": "secret" if variable.type == "secret" else "default",
        "enabled": variable.enabled,
        "description": variable.description,
    })
