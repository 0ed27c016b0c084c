"""Public interface surface for engine collaborators."""

from .interfaces_parts.transport import Transport

__all__ = ["Transport"]
