"""Unified data model for parsed API collections.

All parsers (Postman, Insomnia, Thunder Client, .env, CSV, JSON) convert
their input into these models, and every converter reads them back out.
Models are treated as immutable values: bulk operations build new trees
with ``model_copy`` instead of mutating in place.
"""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from api_collection_kit.config import UNIFIED_MODEL_VERSION

CollectionFormat = Literal["postman", "insomnia", "thunderclient", "env", "csv", "json", "unknown"]
HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]
VariableType = Literal["default", "string", "secret", "number", "boolean"]
CollectionType = Literal["collection", "environment"]

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
VARIABLE_TYPES: tuple[str, ...] = ("default", "string", "secret", "number", "boolean")


def new_id() -> str:
    """Short random identifier for entities the source format left unnamed."""
    return uuid.uuid4().hex[:9]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        """Serialized form with camelCase keys and unset optionals dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Header(_Model):
    """A request header. Disabled headers are kept, not dropped."""

    key: str
    value: str = ""
    enabled: bool = True


class Variable(_Model):
    """A collection or environment variable."""

    id: str = Field(default_factory=new_id)
    key: str
    value: str = ""
    type: VariableType = "default"
    description: str | None = None
    enabled: bool = True


class Request(_Model):
    """A single HTTP request. ``url``, header values and ``body`` may hold {{placeholders}}."""

    id: str = Field(default_factory=new_id)
    name: str
    method: HttpMethod = "GET"
    url: str = ""
    headers: list[Header] = []
    body: str | None = None
    description: str | None = None
    pre_request_script: str | None = Field(default=None, alias="preRequestScript")
    test_script: str | None = Field(default=None, alias="testScript")


class Folder(_Model):
    """A folder of requests and child folders, nested to any depth."""

    id: str = Field(default_factory=new_id)
    name: str
    description: str | None = None
    requests: list[Request] = []
    folders: list["Folder"] = []
    pre_request_script: str | None = Field(default=None, alias="preRequestScript")
    test_script: str | None = Field(default=None, alias="testScript")


class UnifiedCollection(_Model):
    """Root of the canonical tree every format normalizes through."""

    id: str = Field(default_factory=new_id)
    name: str
    description: str | None = None
    version: str = UNIFIED_MODEL_VERSION
    variables: list[Variable] = []
    folders: list[Folder] = []
    requests: list[Request] = []
    source_format: CollectionFormat = Field(default="unknown", alias="sourceFormat")
    type: CollectionType = "collection"
    pre_request_script: str | None = Field(default=None, alias="preRequestScript")
    test_script: str | None = Field(default=None, alias="testScript")

    def iter_requests(self, max_depth: int | None = None):
        """Yield every request in the tree, root level first, then folder by folder."""
        yield from self.requests
        for folder in self.folders:
            yield from _iter_folder_requests(folder, 1, max_depth)


def _iter_folder_requests(folder: Folder, depth: int, max_depth: int | None):
    if max_depth is not None and depth > max_depth:
        return
    yield from folder.requests
    for child in folder.folders:
        yield from _iter_folder_requests(child, depth + 1, max_depth)
