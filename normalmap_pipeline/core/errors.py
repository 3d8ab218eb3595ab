"""Exceptions raised by the normal map pipeline."""
from __future__ import annotations


class NormalMapError(Exception):
    """Base class for every error the pipeline raises."""


class InvalidInputError(NormalMapError, ValueError):
    """Degenerate images or out-of-range generation options."""


class DecodeError(NormalMapError):
    """The image backend could not decode the supplied bytes."""


__all__ = ["NormalMapError", "InvalidInputError", "DecodeError"]
