"""Client for the remote packet store service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

import requests

from .errors import DecodeError, TransportError, ValidationError
from .packet import Packet
from .stream_key import StreamKey, encode_stream_segment

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_S = 10.0
UPLOAD_FIELD = "pcap"


@dataclass(frozen=True)
class PacketPage:
    """One page of packets.

    ``total_pages`` is ``None`` when the store answered with the legacy bare
    array shape, which carries no page count.
    """

    packets: Sequence[Packet]
    total_pages: Optional[int] = None

    @property
    def legacy(self) -> bool:
        return self.total_pages is None


class PacketStore(Protocol):
    def list_packets(self, page: int, limit: int) -> PacketPage:  # pragma: no cover - protocol definition
        ...

    def list_stream(self, key: Union[str, StreamKey], page: int, limit: int) -> PacketPage:  # pragma: no cover
        ...

    def list_streams(self) -> List[str]:  # pragma: no cover - protocol definition
        ...

    def ingest(self, path: Union[str, Path]) -> Dict[str, Any]:  # pragma: no cover - protocol definition
        ...


def parse_packet_page(payload: Any) -> PacketPage:
    """Normalise both response shapes of the packet listing endpoints."""
    if isinstance(payload, list):
        return PacketPage(packets=_parse_packets(payload), total_pages=None)
    if not isinstance(payload, dict):
        raise DecodeError(f"Expected an object or array, got {type(payload).__name__}")
    if "packets" not in payload:
        raise DecodeError("Response object has no 'packets' member")

    raw_packets = payload.get("packets")
    if raw_packets is None:
        raw_packets = []
    if not isinstance(raw_packets, list):
        raise DecodeError("'packets' must be an array")

    total = payload.get("totalPages")
    if total is not None and (isinstance(total, bool) or not isinstance(total, int)):
        raise DecodeError(f"'totalPages' must be an integer, got {total!r}")
    return PacketPage(packets=_parse_packets(raw_packets), total_pages=total)


def _parse_packets(items: List[Any]) -> List[Packet]:
    return [Packet.from_wire(item) for item in items]


def _check_paging(page: int, limit: int) -> None:
    if not isinstance(page, int) or page < 1:
        raise ValidationError(f"page must be a positive integer, got {page!r}")
    if not isinstance(limit, int) or limit < 1:
        raise ValidationError(f"limit must be a positive integer, got {limit!r}")


class HttpPacketStore:
    """Talks to the packet store over HTTP using a shared ``requests`` session."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._session = session if session is not None else requests.Session()

    # ------------------------------------------------------------------
    def __enter__(self) -> "HttpPacketStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    def list_packets(self, page: int, limit: int) -> PacketPage:
        _check_paging(page, limit)
        payload = self._get_json("/packets", params={"page": page, "limit": limit})
        return parse_packet_page(payload)

    def list_stream(self, key: Union[str, StreamKey], page: int = 1, limit: int = 50) -> PacketPage:
        _check_paging(page, limit)
        if not str(key).strip():
            raise ValidationError("stream key must not be empty")
        path = f"/stream/{encode_stream_segment(key)}"
        payload = self._get_json(path, params={"page": page, "limit": limit})
        return parse_packet_page(payload)

    def list_streams(self) -> List[str]:
        payload = self._get_json("/streams")
        if payload is None:
            return []
        if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
            raise DecodeError("'/streams' must return an array of strings")
        return list(payload)

    def ingest(self, path: Union[str, Path]) -> Dict[str, Any]:
        capture = Path(path)
        url = f"{self.base_url}/upload-pcap"
        logger.info("Uploading %s to %s", capture, url)
        with capture.open("rb") as fh:
            try:
                response = self._session.post(
                    url,
                    files={UPLOAD_FIELD: (capture.name, fh, "application/vnd.tcpdump.pcap")},
                    timeout=self.timeout_s,
                )
            except requests.RequestException as exc:
                raise TransportError(f"Upload to {url} failed: {exc}") from exc
        self._raise_for_status(response, url)
        payload = self._decode(response, url)
        if not isinstance(payload, dict):
            raise DecodeError("Upload acknowledgement must be an object")
        return payload

    # ------------------------------------------------------------------
    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self._session.get(url, params=params, timeout=self.timeout_s)
        except requests.Timeout as exc:
            raise TransportError(f"Request to {url} timed out after {self.timeout_s:g}s") from exc
        except requests.RequestException as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc
        self._raise_for_status(response, url)
        return self._decode(response, url)

    @staticmethod
    def _raise_for_status(response: requests.Response, url: str) -> None:
        if response.status_code < 400:
            return
        detail = (response.text or "").strip() or response.reason or "no detail"
        raise TransportError(
            f"{url} answered HTTP {response.status_code}: {detail}",
            status_code=response.status_code,
        )

    @staticmethod
    def _decode(response: requests.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"{url} returned a body that is not JSON") from exc


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_S",
    "HttpPacketStore",
    "PacketPage",
    "PacketStore",
    "parse_packet_page",
]
