"""Content-Type normalization for requests whose body is JSON.

Every parser that reads a request body runs its headers through
``normalize_json_content_type`` so JSON bodies always travel with a
JSON content type, whatever the source client recorded.
"""

import json

from api_collection_kit.models import Header

JSON_CONTENT_TYPE = "application/json"


def is_json_body(body: str | None) -> bool:
    """True when ``body`` is a JSON object or array."""
    if not body or not isinstance(body, str):
        return False
    trimmed = body.strip()
    if not trimmed.startswith(("{", "[")):
        return False
    try:
        json.loads(trimmed)
    except ValueError:
        return False
    return True


def normalize_json_content_type(headers: list[Header], body: str | None) -> list[Header]:
    """Return headers with a JSON Content-Type when the body is JSON.

    A missing Content-Type is appended; ``text/plain`` (with any parameters)
    is replaced by exactly ``application/json``. Any other value is kept.
    """
    if not is_json_body(body):
        return headers

    index = next(
        (i for i, h in enumerate(headers) if h.key.lower() == "content-type"),
        None,
    )
    if index is None:
        return [*headers, Header(key="Content-Type", value=JSON_CONTENT_TYPE, enabled=True)]

    existing = headers[index]
    media_type = existing.value.split(";")[0].strip().lower()
    if media_type != "text/plain":
        return headers

    updated = list(headers)
    updated[index] = existing.model_copy(update={"value": JSON_CONTENT_TYPE})
    return updated
