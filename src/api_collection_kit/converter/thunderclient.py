"""Serialize a UnifiedCollection as a Thunder Client collection."""

import uuid
from datetime import datetime, timezone

from api_collection_kit.models import Folder, Request, UnifiedCollection

from .common import child_folders, compact
from .scripts import translate_script


def to_thunderclient(collection: UnifiedCollection) -> dict:
    """Build a Thunder Client collection.

    Folders and requests are emitted flat and linked with ``containerId``.
    Thunder Client has no pre-request scripts or variables at collection
    level, so those are dropped.
    """
    collection_id = str(uuid.uuid4())
    folders: list[dict] = []
    requests: list[dict] = []

    def add_request(request: Request, container_id: str) -> None:
        test = translate_script(request.test_script, collection.source_format, "thunderclient")
        requests.append(compact({
            "_id": str(uuid.uuid4()),
            "colId": collection_id,
            "containerId": container_id,
            "name": request.name,
            "url": request.url,
            "method": request.method,
            "sortNum": len(requests) + 1,
            "headers": [
                {"name": h.key, "value": h.value, "active": h.enabled}
                for h in request.headers
            ],
            "body": {"type": "raw", "raw": request.body} if request.body else None,
            "description": request.description,
            "tests": [test] if test else None,
        }))

    def add_folder(folder: Folder, container_id: str, depth: int) -> None:
        folder_id = str(uuid.uuid4())
        folders.append({
            "_id": folder_id,
            "name": folder.name,
            "containerId": container_id,
            "sortNum": len(folders) + 1,
        })
        for request in folder.requests:
            add_request(request, folder_id)
        for child in child_folders(folder, depth):
            add_folder(child, folder_id, depth + 1)

    for request in collection.requests:
        add_request(request, "")
    for folder in collection.folders:
        add_folder(folder, "", 1)

    return {
        "_id": collection_id,
        "colName": collection.name,
        "created": datetime.now(timezone.utc).isoformat(),
        "folders": folders,
        "requests": requests,
    }
