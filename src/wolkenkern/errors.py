"""Exceptions raised by pipeline stages."""

from __future__ import annotations


class WolkenkernError(Exception):
    """Base exception for stage and iterator failures."""

    pass


class ImpedanceError(WolkenkernError):
    """Raised when a stage's inherited schema lacks a required dimension."""

    pass


class ResourceAcquisitionError(WolkenkernError):
    """Raised when the CRS backend cannot parse a descriptor or build a transform.

    Attributes:
        descriptor: The spatial reference text that could not be used
            (empty when the transform itself failed).
        diagnostic: Message reported by the backend.
    """

    def __init__(self, message: str, descriptor: str = "", diagnostic: str = "") -> None:
        super().__init__(message)
        self.descriptor = descriptor
        self.diagnostic = diagnostic


class TransformError(WolkenkernError):
    """Raised when a coordinate triple cannot be transformed.

    Attributes:
        diagnostic: Message reported by the backend.
        point: The (x, y, z) triple before transformation.
    """

    def __init__(
        self,
        message: str,
        diagnostic: str = "",
        point: tuple[float, float, float] | None = None,
    ) -> None:
        super().__init__(message)
        self.diagnostic = diagnostic
        self.point = point


class PreconditionError(WolkenkernError):
    """Raised when a stage is used out of order (programmer error)."""

    pass
