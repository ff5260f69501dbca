"""Exception hierarchy shared by the store client and the session controller."""

from __future__ import annotations

from typing import Optional


class PacketStoreError(RuntimeError):
    """Base class for failures talking to the packet store service."""


class TransportError(PacketStoreError):
    """The store could not be reached or answered with an HTTP error."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(PacketStoreError):
    """The store answered, but the body does not have the expected shape."""


class ValidationError(ValueError):
    """A caller supplied a page, size or key outside the accepted range."""


__all__ = ["PacketStoreError", "TransportError", "DecodeError", "ValidationError"]
