"""Hushmap: locate alert-suppression comments and the source ranges they cover."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.3.0"
