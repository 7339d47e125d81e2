"""Parsers that normalize every supported source format into a UnifiedCollection."""

import json
import logging
from pathlib import Path

import yaml

from api_collection_kit.errors import ParseError, UnsupportedFormatError
from api_collection_kit.models import UnifiedCollection

from .detect import detect_file_format, detect_format
from .insomnia import parse_insomnia
from .postman import parse_postman
from .thunderclient import parse_thunderclient
from .variables import parse_csv, parse_env, parse_generic_json

logger = logging.getLogger(__name__)

# Parsers that take loaded JSON data
PARSERS = {
    "postman": parse_postman,
    "insomnia": parse_insomnia,
    "thunderclient": parse_thunderclient,
    "json": parse_generic_json,
}

# Parsers that take raw text
TEXT_PARSERS = {
    "env": parse_env,
    "csv": parse_csv,
}

YAML_EXTENSIONS = (".yaml", ".yml")


def parse_collection(data, fmt: str | None = None) -> UnifiedCollection:
    """Parse loaded JSON data, detecting its format unless ``fmt`` is given."""
    fmt = fmt or detect_format(data)
    parser = PARSERS.get(fmt)
    if parser is None:
        raise UnsupportedFormatError(fmt)
    return parser(data)


def parse_collection_text(text: str, filename: str = "collection.json") -> UnifiedCollection:
    """Parse file content, routing on the file name first and structure second."""
    fmt = detect_file_format(filename)
    if fmt in TEXT_PARSERS:
        return TEXT_PARSERS[fmt](text)

    data = load_structured(text, filename)
    return parse_collection(data)


def parse_collection_file(file_path: Path) -> UnifiedCollection:
    """Read and parse a collection file."""
    file_path = Path(file_path)
    text = read_text_file(file_path)
    logger.debug("Parsing collection file %s", file_path)
    return parse_collection_text(text, file_path.name)


def read_text_file(file_path: Path) -> str:
    """Read a UTF-8 file, tolerating a byte order mark."""
    try:
        return Path(file_path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"{Path(file_path).name} is not valid UTF-8: {e.reason} at byte {e.start}") from e


def load_structured(text: str, filename: str = "") -> object:
    """Load JSON, or YAML for ``.yaml``/``.yml`` files (Insomnia can export either)."""
    if filename.lower().endswith(YAML_EXTENSIONS):
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML in {filename}: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON{' in ' + filename if filename else ''}: {e.msg} (line {e.lineno})") from e


__all__ = [
    "PARSERS",
    "TEXT_PARSERS",
    "detect_file_format",
    "detect_format",
    "load_structured",
    "parse_collection",
    "parse_collection_file",
    "parse_collection_text",
    "parse_csv",
    "parse_env",
    "parse_generic_json",
    "parse_insomnia",
    "parse_postman",
    "parse_thunderclient",
    "read_text_file",
]
