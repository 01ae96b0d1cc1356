"""Plant detection interface."""

from .interface import Detector

__all__ = [
    "Detector",
]
