"""Request/response payloads and wiring for the HTTP surface."""

from __future__ import annotations

from .state import ApiState

__all__ = ["ApiState"]
