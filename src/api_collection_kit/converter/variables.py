"""Serializers for variable-only targets: .env text, CSV text and flat JSON."""

import csv
import io
import re

from api_collection_kit.models import UnifiedCollection, Variable

CSV_HEADER = "key,value,type,description,enabled"

_NEEDS_QUOTES = re.compile(r"""\s|^["']|["']$""")


def to_env(collection: UnifiedCollection) -> str:
    """Enabled variables as ``KEY=value`` lines; descriptions become comments."""
    lines = []
    for v in collection.variables:
        if not v.enabled:
            continue
        value = _env_value(v.value)
        if v.description:
            lines.append("# " + " ".join(v.description.splitlines()))
        lines.append(f"{v.key}={value}")
    return "\n".join(lines)


def _env_value(value: str) -> str:
    """Double-quote values with whitespace or edge quotes, escaping \\, " and newlines."""
    if not _NEEDS_QUOTES.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\r", "\\r")
    return f'"{escaped}"'


def variables_to_csv(variables: list[Variable]) -> str:
    """Header row followed by one fully quoted row per variable."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for v in variables:
        writer.writerow([v.key, v.value, v.type, v.description or "", "true" if v.enabled else "false"])
    rows = buffer.getvalue().rstrip("\n")
    return f"{CSV_HEADER}\n{rows}" if rows else CSV_HEADER


def to_csv(collection: UnifiedCollection) -> str:
    return variables_to_csv(collection.variables)


def to_generic_json(collection: UnifiedCollection) -> dict:
    """Enabled variables as a flat object. Later duplicates win."""
    result = {}
    for v in collection.variables:
        if v.enabled:
            result[v.key] = v.value
    return result
