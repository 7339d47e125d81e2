"""Insomnia export (format 4) parser.

An Insomnia export is a flat list of resources tagged by ``_type``. Folders
(``request_group``) and requests point at their parent through ``parentId``;
the tree is rebuilt here by collecting the children of each parent id.
"""

import logging

from api_collection_kit.config import MAX_FOLDER_DEPTH
from api_collection_kit.errors import ParseError
from api_collection_kit.models import Folder, Header, Request, UnifiedCollection, Variable, new_id

from .common import model_errors, normalize_method, optional_text, stringify
from .content_type import normalize_json_content_type

logger = logging.getLogger(__name__)


def parse_insomnia(data: dict) -> UnifiedCollection:
    """Parse an Insomnia export into a UnifiedCollection."""
    resources = data.get("resources") if isinstance(data, dict) else None
    if not isinstance(resources, list):
        raise ParseError("Invalid Insomnia export: expected a 'resources' array")
    resources = [r for r in resources if isinstance(r, dict)]

    with model_errors("Insomnia export"):
        return _build_collection(resources)


def _build_collection(resources: list[dict]) -> UnifiedCollection:
    workspace = next((r for r in resources if r.get("_type") == "workspace"), None)
    environments = [r for r in resources if r.get("_type") == "environment"]
    requests = [r for r in resources if r.get("_type") == "request"]
    groups = [r for r in resources if r.get("_type") == "request_group"]

    variables = [
        Variable(key=str(key), value=stringify(value), type="default", enabled=True)
        for env in environments
        if isinstance(env.get("data"), dict)
        for key, value in env["data"].items()
    ]

    workspace_id = workspace.get("_id") if workspace else None

    def is_root(resource: dict) -> bool:
        parent = resource.get("parentId")
        return not parent or parent == workspace_id

    builder = _TreeBuilder(requests, groups)
    workspace = workspace or {}

    collection = UnifiedCollection(
        id=workspace.get("_id") or new_id(),
        name=workspace.get("name") or "Insomnia Collection",
        description=optional_text(workspace.get("description")) or None,
        variables=variables,
        folders=[builder.folder(g, 1) for g in groups if is_root(g)],
        requests=[_parse_request(r) for r in requests if is_root(r)],
        source_format="insomnia",
        type="environment" if environments and not requests else "collection",
        pre_request_script=workspace.get("preRequestScript") or None,
        test_script=workspace.get("afterResponseScript") or None,
    )
    logger.debug(
        "Parsed Insomnia export %r: %d resources, %d variables",
        collection.name, len(resources), len(variables),
    )
    return collection


class _TreeBuilder:
    """Builds folders from parentId links, refusing to revisit a group."""

    def __init__(self, requests: list[dict], groups: list[dict]):
        self.requests = requests
        self.groups = groups
        self.visited: set[str] = set()

    def folder(self, group: dict, depth: int) -> Folder:
        group_id = group.get("_id") or new_id()
        self.visited.add(group_id)

        children: list[Folder] = []
        if depth >= MAX_FOLDER_DEPTH:
            logger.warning("Folder %r exceeds depth %d, children dropped", group.get("name"), MAX_FOLDER_DEPTH)
        else:
            for child in self.groups:
                if child.get("parentId") == group_id and child.get("_id") not in self.visited:
                    children.append(self.folder(child, depth + 1))

        return Folder(
            id=group_id,
            name=group.get("name") or "Folder",
            description=optional_text(group.get("description")) or None,
            requests=[_parse_request(r) for r in self.requests if r.get("parentId") == group_id],
            folders=children,
            pre_request_script=group.get("preRequestScript") or None,
            test_script=group.get("afterResponseScript") or None,
        )


def _parse_request(resource: dict) -> Request:
    body = resource.get("body")
    text = body.get("text") if isinstance(body, dict) else None
    headers = [
        Header(
            key=stringify(h.get("name")),
            value=stringify(h.get("value")),
            enabled=not h.get("disabled", False),
        )
        for h in resource.get("headers") or []
        if isinstance(h, dict)
    ]

    return Request(
        id=resource.get("_id") or new_id(),
        name=resource.get("name") or "Request",
        method=normalize_method(resource.get("method")),
        url=stringify(resource.get("url")),
        headers=normalize_json_content_type(headers, text),
        body=text,
        description=optional_text(resource.get("description")) or None,
        pre_request_script=resource.get("preRequestScript") or None,
        test_script=resource.get("afterResponseScript") or None,
    )
