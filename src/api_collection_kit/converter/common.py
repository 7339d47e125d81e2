"""Helpers shared by the format serializers."""

import json
import logging

from api_collection_kit.config import MAX_FOLDER_DEPTH
from api_collection_kit.models import Folder

logger = logging.getLogger(__name__)


def compact(data: dict) -> dict:
    """Drop keys whose value is None, the way absent fields are left out of exports."""
    return {k: v for k, v in data.items() if v is not None}


def dump_json(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def child_folders(folder: Folder, depth: int) -> list[Folder]:
    """Children of ``folder`` at ``depth``, or none once the depth limit is hit."""
    if depth >= MAX_FOLDER_DEPTH:
        if folder.folders:
            logger.warning(
                "Folder %r exceeds depth %d, %d child folders skipped",
                folder.name, MAX_FOLDER_DEPTH, len(folder.folders),
            )
        return []
    return folder.folders
