"""Exceptions raised by api-collection-kit.

Every error is a ``ValueError`` so callers that only care about bad input
can catch that, while the CLI catches ``CollectionError``.
"""


class CollectionError(ValueError):
    """Base class for all collection interchange errors."""


class ParseError(CollectionError):
    """Input does not match the shape of the format it claims to be."""


class UnsupportedFormatError(CollectionError):
    """No parser or serializer is registered for the requested format."""

    def __init__(self, fmt: str, action: str = "format"):
        self.format = fmt
        super().__init__(f"Unsupported {action}: {fmt}")


class VariableImportError(CollectionError):
    """Variable import content could not be parsed."""


class StorageError(CollectionError):
    """The collection store file could not be read."""
