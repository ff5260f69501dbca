"""Session configuration and its JSON persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import ValidationError
from .store import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_S

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS_PATH = Path.home() / ".pcapview.json"


@dataclass
class SessionOptions:
    base_url: str = DEFAULT_BASE_URL
    page_size: int = 10
    stream_page_size: int = 50
    request_timeout_s: float = DEFAULT_TIMEOUT_S
    # Older viewers showed a fixed page count instead of the store's total.
    dynamic_total_pages: bool = True
    fixed_total_pages: int = 5
    stream_enabled: bool = True
    canonical_stream_keys: bool = True
    max_workers: int = 4

    def validate(self) -> "SessionOptions":
        for name in ("page_size", "stream_page_size", "fixed_total_pages", "max_workers"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValidationError(f"{name} must be a positive integer, got {value!r}")
        for name in ("dynamic_total_pages", "stream_enabled", "canonical_stream_keys"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValidationError(f"{name} must be true or false, got {value!r}")
        if self.request_timeout_s <= 0:
            raise ValidationError(
                f"request_timeout_s must be greater than 0, got {self.request_timeout_s!r}"
            )
        if not self.base_url:
            raise ValidationError("base_url must not be empty")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionOptions":
        defaults = cls()
        return cls(
            base_url=str(data.get("base_url", defaults.base_url)),
            page_size=int(data.get("page_size", defaults.page_size)),
            stream_page_size=int(data.get("stream_page_size", defaults.stream_page_size)),
            request_timeout_s=float(data.get("request_timeout_s", defaults.request_timeout_s)),
            dynamic_total_pages=_flag(data, "dynamic_total_pages", defaults.dynamic_total_pages),
            fixed_total_pages=int(data.get("fixed_total_pages", defaults.fixed_total_pages)),
            stream_enabled=_flag(data, "stream_enabled", defaults.stream_enabled),
            canonical_stream_keys=_flag(
                data, "canonical_stream_keys", defaults.canonical_stream_keys
            ),
            max_workers=int(data.get("max_workers", defaults.max_workers)),
        )


def _flag(data: Dict[str, Any], name: str, default: bool) -> bool:
    value = data.get(name, default)
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false, got {value!r}")
    return value


def load_options(path: Optional[Union[str, Path]] = None) -> SessionOptions:
    """Read options from JSON, falling back to defaults when unusable."""
    options_path = Path(path) if path is not None else DEFAULT_OPTIONS_PATH
    if not options_path.exists():
        return SessionOptions()
    try:
        raw = json.loads(options_path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("top-level JSON value must be an object")
        known = {f.name for f in fields(SessionOptions)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning("Ignoring unknown options in %s: %s", options_path, ", ".join(unknown))
        return SessionOptions.from_dict(raw).validate()
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Could not read options from %s (%s); using defaults", options_path, exc)
        return SessionOptions()


def save_options(options: SessionOptions, path: Optional[Union[str, Path]] = None) -> Path:
    options_path = Path(path) if path is not None else DEFAULT_OPTIONS_PATH
    options_path.write_text(json.dumps(options.to_dict(), indent=2), encoding="utf-8")
    return options_path


__all__ = ["DEFAULT_OPTIONS_PATH", "SessionOptions", "load_options", "save_options"]
