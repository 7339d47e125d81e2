"""Serialize a UnifiedCollection as an Insomnia export (format 4)."""

import uuid
from datetime import datetime, timezone

from api_collection_kit.config import EXPORT_SOURCE, INSOMNIA_EXPORT_FORMAT
from api_collection_kit.models import Folder, Request, UnifiedCollection

from .common import child_folders, compact
from .scripts import translate_script


def _resource_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def to_insomnia(collection: UnifiedCollection) -> dict:
    """Flatten the collection tree into Insomnia resources linked by parentId."""
    source = collection.source_format

    def scripts(entity) -> dict:
        return compact({
            "preRequestScript": translate_script(entity.pre_request_script, source, "insomnia") or None,
            "afterResponseScript": translate_script(entity.test_script, source, "insomnia") or None,
        })

    workspace_id = _resource_id("wrk")
    resources: list[dict] = [
        compact({
            "_id": workspace_id,
            "_type": "workspace",
            "name": collection.name,
            "description": collection.description,
            "scope": "environment" if collection.type == "environment" else "collection",
            **scripts(collection),
        })
    ]

    if collection.variables:
        data = {}
        for v in collection.variables:
            if v.enabled:
                data[v.key] = v.value
        resources.append({
            "_id": _resource_id("env"),
            "_type": "environment",
            "name": "Base Environment",
            "data": data,
            "parentId": workspace_id,
        })

    def add_request(request: Request, parent_id: str) -> None:
        resources.append(compact({
            "_id": _resource_id("req"),
            "_type": "request",
            "parentId": parent_id,
            "name": request.name,
            "method": request.method,
            "url": request.url,
            "headers": [
                {"name": h.key, "value": h.value, "disabled": not h.enabled}
                for h in request.headers
            ],
            "body": {"text": request.body} if request.body else None,
            "description": request.description,
            **scripts(request),
        }))

    def add_folder(folder: Folder, parent_id: str, depth: int) -> None:
        folder_id = _resource_id("fld")
        resources.append(compact({
            "_id": folder_id,
            "_type": "request_group",
            "parentId": parent_id,
            "name": folder.name,
            "description": folder.description,
            **scripts(folder),
        }))
        for request in folder.requests:
            add_request(request, folder_id)
        for child in child_folders(folder, depth):
            add_folder(child, folder_id, depth + 1)

    for request in collection.requests:
        add_request(request, workspace_id)
    for folder in collection.folders:
        add_folder(folder, workspace_id, 1)

    return {
        "_type": "export",
        "__export_format": INSOMNIA_EXPORT_FORMAT,
        "__export_date": datetime.now(timezone.utc).isoformat(),
        "__export_source": EXPORT_SOURCE,
        "resources": resources,
    }
