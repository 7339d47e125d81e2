"""Settings shared by parsers, converters and the store.

Values that make sense to tune per machine are read from the environment.
"""

import os
from pathlib import Path

UNIFIED_MODEL_VERSION = "1.0"

POSTMAN_SCHEMA_URL = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"
INSOMNIA_EXPORT_FORMAT = 4
EXPORT_SOURCE = "api-collection-kit"

MAX_FOLDER_DEPTH = int(os.getenv("API_COLLECTION_KIT_MAX_DEPTH", "64"))

DEFAULT_STORE_PATH = Path(
    os.getenv(
        "API_COLLECTION_KIT_STORE",
        str(Path.home() / ".api-collection-kit" / "collections.json"),
    )
)
