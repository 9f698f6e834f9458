from __future__ import annotations


class JsonDeckError(Exception):
    """Base class for errors raised by jsondeck."""


class DocumentError(JsonDeckError):
    """The input cannot be read as a presentation document at all."""


class GeometryError(JsonDeckError):
    """Placement hints are present but not numeric (e.g. gridArea.columnStart="a")."""


class EncoderError(JsonDeckError):
    """The binary encoder failed to produce a presentation."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
