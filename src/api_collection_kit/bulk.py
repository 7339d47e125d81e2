"""Bulk operations on a collection: find, find & replace, variable edit/import/export.

Every operation returns a new collection and leaves its input untouched.
"""

import json
import logging
import re
from typing import Literal

from pydantic import BaseModel, ValidationError

from api_collection_kit.config import MAX_FOLDER_DEPTH
from api_collection_kit.converter.variables import variables_to_csv
from api_collection_kit.errors import ParseError, UnsupportedFormatError, VariableImportError
from api_collection_kit.models import Folder, Request, UnifiedCollection, Variable
from api_collection_kit.parser.common import normalize_variable_type, optional_text, stringify
from api_collection_kit.parser.variables import parse_csv_variables

logger = logging.getLogger(__name__)

SearchScope = Literal["all", "variables", "requests"]
VariableFormat = Literal["json", "csv"]


class SearchResult(BaseModel):
    """One field that contains the search term."""

    type: Literal["variable", "url", "header", "body"]
    path: str  # "Collection / Folder / Request"
    field: str
    value: str
    match: str


class ReplaceOptions(BaseModel):
    find: str
    replace: str = ""
    scope: SearchScope = "all"
    case_sensitive: bool = False


class ReplaceResult(BaseModel):
    collection: UnifiedCollection
    count: int


def _pattern(term: str, case_sensitive: bool) -> re.Pattern:
    return re.compile(re.escape(term), 0 if case_sensitive else re.IGNORECASE)


def find_in_collection(
    collection: UnifiedCollection,
    term: str,
    scope: SearchScope = "all",
    case_sensitive: bool = False,
) -> list[SearchResult]:
    """List every variable, URL, header and body that contains ``term``."""
    if not term:
        return []
    pattern = _pattern(term, case_sensitive)
    results: list[SearchResult] = []

    if scope in ("variables", "all"):
        for v in collection.variables:
            path = f"Variables / {v.key}"
            if pattern.search(v.key):
                results.append(SearchResult(type="variable", path=path, field="key", value=v.key, match=term))
            if pattern.search(v.value):
                results.append(SearchResult(type="variable", path=path, field="value", value=v.value, match=term))

    if scope in ("requests", "all"):

        def search_requests(requests: list[Request], path: str) -> None:
            for r in requests:
                request_path = f"{path} / {r.name}"
                if pattern.search(r.url):
                    results.append(SearchResult(type="url", path=request_path, field="url", value=r.url, match=term))
                for h in r.headers:
                    if pattern.search(h.key) or pattern.search(h.value):
                        results.append(
                            SearchResult(type="header", path=request_path, field=f"header.{h.key}", value=h.value, match=term)
                        )
                if r.body and pattern.search(r.body):
                    results.append(
                        SearchResult(type="body", path=request_path, field="body", value=r.body[:100], match=term)
                    )

        def search_folders(folders: list[Folder], path: str, depth: int) -> None:
            if depth > MAX_FOLDER_DEPTH:
                if folders:
                    logger.warning("Search stopped at folder depth %d under %r", MAX_FOLDER_DEPTH, path)
                return
            for f in folders:
                folder_path = f"{path} / {f.name}"
                search_requests(f.requests, folder_path)
                search_folders(f.folders, folder_path, depth + 1)

        search_requests(collection.requests, collection.name)
        search_folders(collection.folders, collection.name, 1)

    return results


class _Replacer:
    """Literal substring replacement that tallies every occurrence replaced."""

    def __init__(self, options: ReplaceOptions):
        self.pattern = _pattern(options.find, options.case_sensitive)
        self.replacement = options.replace
        self.count = 0

    def __call__(self, text: str | None) -> str | None:
        if not text:
            return text
        # A callable keeps backslashes in the replacement literal
        new_text, n = self.pattern.subn(lambda _: self.replacement, text)
        self.count += n
        return new_text

    def request(self, request: Request) -> Request:
        return request.model_copy(update={
            "url": self(request.url),
            "body": self(request.body),
            "headers": [h.model_copy(update={"value": self(h.value)}) for h in request.headers],
        })

    def folder(self, folder: Folder, depth: int = 1) -> Folder:
        """Replace within ``folder``. Folders past ``MAX_FOLDER_DEPTH`` are kept as they are."""
        if depth >= MAX_FOLDER_DEPTH:
            children = folder.folders
            if children:
                logger.warning("Folder %r exceeds depth %d, children left unchanged", folder.name, MAX_FOLDER_DEPTH)
        else:
            children = [self.folder(f, depth + 1) for f in folder.folders]
        return folder.model_copy(update={
            "requests": [self.request(r) for r in folder.requests],
            "folders": children,
        })


def replace_in_collection(collection: UnifiedCollection, options: ReplaceOptions) -> ReplaceResult:
    """Replace ``options.find`` in the fields covered by ``options.scope``.

    ``variables`` touches variable values, ``requests`` touches request URLs,
    bodies and header values in every folder, ``all`` does both. The count
    is the number of occurrences replaced. When nothing matches, the original
    collection object is returned.
    """
    if not options.find:
        return ReplaceResult(collection=collection, count=0)

    replacer = _Replacer(options)
    update = {}
    if options.scope in ("variables", "all"):
        update["variables"] = [v.model_copy(update={"value": replacer(v.value)}) for v in collection.variables]
    if options.scope in ("requests", "all"):
        update["requests"] = [replacer.request(r) for r in collection.requests]
        update["folders"] = [replacer.folder(f) for f in collection.folders]

    if replacer.count == 0:
        return ReplaceResult(collection=collection, count=0)

    logger.debug("Replaced %d occurrences of %r in %r", replacer.count, options.find, collection.name)
    return ReplaceResult(collection=collection.model_copy(update=update), count=replacer.count)


def bulk_edit_variables(collection: UnifiedCollection, updates: list[dict]) -> UnifiedCollection:
    """Apply partial updates to variables matched by ``id``. Unknown ids are ignored."""
    by_id = {u["id"]: u for u in updates if u.get("id")}
    variables = []
    for v in collection.variables:
        update = by_id.get(v.id)
        if update:
            v = Variable.model_validate({**v.model_dump(), **update})
        variables.append(v)
    return collection.model_copy(update={"variables": variables})


def export_variables(collection: UnifiedCollection, fmt: VariableFormat) -> str:
    """Export variables as pretty-printed JSON or as CSV."""
    if fmt == "csv":
        return variables_to_csv(collection.variables)
    if fmt == "json":
        return json.dumps(
            [v.model_dump(include={"key", "value", "type", "description", "enabled"}, exclude_none=True)
             for v in collection.variables],
            indent=2,
            ensure_ascii=False,
        )
    raise UnsupportedFormatError(fmt, "variable format")


def import_variables(collection: UnifiedCollection, content: str, fmt: VariableFormat) -> UnifiedCollection:
    """Return a copy of ``collection`` whose variables are replaced by ``content``.

    The import is a full replacement, not a merge. ``content`` is parsed
    completely before anything is built, so a failure leaves no partial result.
    """
    if fmt == "csv":
        try:
            variables = parse_csv_variables(content)
        except ParseError as e:
            raise VariableImportError(str(e)) from e
    elif fmt == "json":
        variables = _parse_json_variables(content)
    else:
        raise UnsupportedFormatError(fmt, "variable format")

    logger.debug("Imported %d variables into %r", len(variables), collection.name)
    return collection.model_copy(update={"variables": variables})


def _parse_json_variables(content: str) -> list[Variable]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise VariableImportError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e
    if not isinstance(data, list):
        raise VariableImportError("Invalid variables JSON: expected an array of variables")

    variables = []
    for index, item in enumerate(data):
        if not isinstance(item, dict) or not item.get("key"):
            raise VariableImportError(f"Invalid variable at index {index}: expected an object with a 'key'")
        try:
            variables.append(
                Variable(
                    key=stringify(item["key"]),
                    value=stringify(item.get("value")),
                    type=normalize_variable_type(item.get("type")),
                    description=optional_text(item.get("description")),
                    enabled=item.get("enabled") is not False,
                )
            )
        except ValidationError as e:
            raise VariableImportError(f"Invalid variable at index {index}: {e}") from e
    return variables
