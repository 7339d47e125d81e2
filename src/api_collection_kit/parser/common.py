"""Small coercions shared by the format parsers."""

import json
import logging
from contextlib import contextmanager

from pydantic import ValidationError

from api_collection_kit.errors import ParseError
from api_collection_kit.models import HTTP_METHODS, VARIABLE_TYPES

logger = logging.getLogger(__name__)


def stringify(value) -> str:
    """Render a scalar the way it appears in the source JSON (``true``, ``12``)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def normalize_method(method) -> str:
    """Upper-case an HTTP method, falling back to GET for unsupported verbs."""
    upper = str(method or "GET").strip().upper()
    if upper in HTTP_METHODS:
        return upper
    logger.warning("Unsupported HTTP method %r, using GET", method)
    return "GET"


def normalize_variable_type(value) -> str:
    """Map a free-form type column onto the known variable types."""
    text = str(value or "").strip().lower()
    return text if text in VARIABLE_TYPES else "default"


def optional_text(value) -> str | None:
    """Coerce a description-like field, keeping absent values as None."""
    if value is None:
        return None
    if isinstance(value, dict):
        # Postman v2.1 allows {"content": ..., "type": "text/markdown"}
        return optional_text(value.get("content"))
    return stringify(value)


def strip_matching_quotes(value: str) -> str:
    """Remove one layer of surrounding matching single or double quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


@contextmanager
def model_errors(source: str):
    """Re-raise model validation failures as ParseError naming ``source``."""
    try:
        yield
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "value"
        raise ParseError(f"Invalid {source}: {field}: {first['msg']}") from e
