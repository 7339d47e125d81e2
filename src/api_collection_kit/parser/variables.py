"""Parsers for variable-only sources: .env files, CSV files and flat JSON objects.

Each produces an ``environment`` UnifiedCollection with no requests.
"""

import csv
import io
import logging
import re

from api_collection_kit.errors import ParseError
from api_collection_kit.models import UnifiedCollection, Variable

from .common import normalize_variable_type, stringify, strip_matching_quotes

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("key", "value", "type", "description", "enabled")

_ENV_ESCAPE = re.compile(r'\\(["\\nr])')
_ENV_ESCAPES = {"n": "\n", "r": "\r", '"': '"', "\\": "\\"}


def parse_env(content: str) -> UnifiedCollection:
    """Parse ``KEY=value`` lines. Blank lines and ``#`` comments are skipped."""
    variables = []
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        key, sep, value = trimmed.partition("=")
        if not sep or not key.strip():
            logger.debug("Skipping .env line without a key: %r", trimmed)
            continue
        variables.append(
            Variable(
                key=key.strip(),
                value=_unquote_env_value(value.strip()),
                type="default",
                enabled=True,
            )
        )

    return UnifiedCollection(
        name="Environment Variables",
        variables=variables,
        source_format="env",
        type="environment",
    )


def _unquote_env_value(value: str) -> str:
    """Strip matching quotes. Double-quoted values also expand \\n, \\r, \\" and \\\\."""
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _ENV_ESCAPE.sub(lambda m: _ENV_ESCAPES[m.group(1)], value[1:-1])
    return strip_matching_quotes(value)


def parse_csv(content: str) -> UnifiedCollection:
    """Parse ``key,value,type,description,enabled`` rows into variables."""
    return UnifiedCollection(
        name="CSV Variables",
        variables=parse_csv_variables(content),
        source_format="csv",
        type="environment",
    )


def parse_csv_variables(content: str) -> list[Variable]:
    """Read variable rows, skipping a first line that is a header.

    The first line counts as a header when its first column is ``key``, so a
    data row such as ``apiKey,...`` is kept. Quoted fields may contain
    commas; a row with fewer than two columns is ignored.
    """
    lines = [line for line in content.splitlines() if line.strip()]
    try:
        rows = list(csv.reader(io.StringIO("\n".join(lines)), skipinitialspace=True))
    except csv.Error as e:
        raise ParseError(f"Invalid CSV variables: {e}") from e

    variables = []
    for index, row in enumerate(rows):
        parts = [strip_matching_quotes(p.strip()) for p in row]
        if index == 0 and parts and parts[0].lower() == "key":
            continue
        if len(parts) < 2:
            continue
        parts += [""] * (len(CSV_COLUMNS) - len(parts))
        variables.append(
            Variable(
                key=parts[0],
                value=parts[1],
                type=normalize_variable_type(parts[2]),
                description=parts[3] or None,
                enabled=parts[4] != "false",
            )
        )
    return variables


def parse_generic_json(data) -> UnifiedCollection:
    """Turn each top-level key of a flat JSON object into a variable.

    Nested values are not walked; they are kept as their JSON text.
    """
    variables = []
    if isinstance(data, dict):
        variables = [
            Variable(key=str(key), value=stringify(value), type="default", enabled=True)
            for key, value in data.items()
        ]

    return UnifiedCollection(
        name="Generic Collection",
        variables=variables,
        source_format="json",
        type="environment",
    )
