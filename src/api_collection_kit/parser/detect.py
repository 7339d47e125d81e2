"""Auto-detect the source format of an API collection."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

FILE_EXTENSION_FORMATS = {
    ".env": "env",
    ".csv": "csv",
}


def detect_format(data) -> str:
    """Classify already-loaded JSON data by its structural fingerprint.

    Returns 'postman', 'insomnia', 'thunderclient', 'json' or 'unknown'.
    Checks run in order and the first match wins.
    """
    if isinstance(data, list):
        return "json"
    if not isinstance(data, dict):
        return "unknown"

    info = data.get("info")
    if isinstance(info, dict) and isinstance(info.get("schema"), str) and "postman" in info["schema"]:
        fmt = "postman"
    elif data.get("_postman_variable_scope") or isinstance(data.get("values"), list):
        fmt = "postman"
    elif data.get("_type") == "export" and data.get("__export_format"):
        fmt = "insomnia"
    elif data.get("colName") and data.get("requests") is not None:
        fmt = "thunderclient"
    else:
        fmt = "json"

    logger.debug("Detected collection format: %s", fmt)
    return fmt


def detect_file_format(file_path: Path | str, data=None) -> str:
    """Detect the format of a collection file.

    ``.env`` and ``.csv`` files are recognized by name alone; anything else
    is classified by ``detect_format`` on its loaded content.
    """
    name = Path(file_path).name.lower()
    for extension, fmt in FILE_EXTENSION_FORMATS.items():
        if name.endswith(extension):
            return fmt
    return detect_format(data)
