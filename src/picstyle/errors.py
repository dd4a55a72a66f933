"""Exception hierarchy for PicStyle.

Pipeline errors are terminal for the request that raised them; nothing in
the core retries or swallows them. The HTTP layer maps them to responses.
"""

from __future__ import annotations


class PicstyleError(Exception):
    """Base class for all PicStyle errors."""


class InvalidDimensions(PicstyleError, ValueError):
    """Zero, negative or out-of-bounds geometry."""


class UnsupportedFormat(PicstyleError):
    """The encoded bytes are not an image format the codec understands."""


class CorruptData(PicstyleError):
    """The image format was recognised but the data could not be decoded."""


class DimensionMismatch(PicstyleError, ValueError):
    """Two buffers that must share dimensions do not."""


class EncodeFailure(PicstyleError):
    """Serializing a buffer to a compressed format failed."""


class TemplateNotFound(PicstyleError, KeyError):
    """No template is stored under the requested id."""

    def __init__(self, template_id: str) -> None:
        super().__init__(template_id)
        self.template_id = template_id

    def __str__(self) -> str:
        return f"Template not found: {self.template_id}"


class TemplateValidationError(PicstyleError, ValueError):
    """A template creation request is missing a name or enough images."""
