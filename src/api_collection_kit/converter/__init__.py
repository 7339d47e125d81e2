"""Converters that serialize a UnifiedCollection into each supported target format."""

import logging

from api_collection_kit.errors import UnsupportedFormatError
from api_collection_kit.models import UnifiedCollection

from .common import dump_json
from .insomnia import to_insomnia
from .postman import to_postman, to_postman_environment
from .scripts import translate_script
from .thunderclient import to_thunderclient
from .variables import to_csv, to_env, to_generic_json, variables_to_csv

logger = logging.getLogger(__name__)

# Serializers returning a JSON-ready structure
JSON_CONVERTERS = {
    "postman": to_postman,
    "insomnia": to_insomnia,
    "thunderclient": to_thunderclient,
    "json": to_generic_json,
}

# Serializers returning finished text
TEXT_CONVERTERS = {
    "env": to_env,
    "csv": to_csv,
}

TARGET_FORMATS: tuple[str, ...] = (*JSON_CONVERTERS, *TEXT_CONVERTERS)


def convert_collection(collection: UnifiedCollection, target: str) -> str:
    """Serialize ``collection`` as ``target`` format text."""
    logger.debug("Converting %r (%s) to %s", collection.name, collection.source_format, target)
    if target in TEXT_CONVERTERS:
        return TEXT_CONVERTERS[target](collection)
    if target in JSON_CONVERTERS:
        return dump_json(JSON_CONVERTERS[target](collection))
    raise UnsupportedFormatError(target, "target format")


__all__ = [
    "JSON_CONVERTERS",
    "TARGET_FORMATS",
    "TEXT_CONVERTERS",
    "convert_collection",
    "to_csv",
    "to_env",
    "to_generic_json",
    "to_insomnia",
    "to_postman",
    "to_postman_environment",
    "to_thunderclient",
    "translate_script",
    "variables_to_csv",
]
