"""Paging and filter state for the primary packet view."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class QueryState:
    """Page number, page size and filter text.

    ``total_pages`` stays at 1 until the first successful response; only the
    fetch orchestrator writes it. Out-of-range pages are clamped, never
    rejected.
    """

    limit: int = 10
    page: int = 1
    filter_text: str = ""
    total_pages: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
            raise ValidationError(f"limit must be a positive integer, got {self.limit!r}")
        self.total_pages = max(1, int(self.total_pages))
        self.page = self.clamp(self.page)

    def clamp(self, page: int) -> int:
        if isinstance(page, bool) or not isinstance(page, int):
            raise ValidationError(f"page must be an integer, got {page!r}")
        return min(max(page, 1), self.total_pages)

    def set_page(self, page: int) -> bool:
        """Move to ``page`` (clamped); return whether the page changed."""
        effective = self.clamp(page)
        if effective != page:
            logger.debug("Clamped page %d to %d (total %d)", page, effective, self.total_pages)
        if effective == self.page:
            return False
        self.page = effective
        return True

    def set_filter_text(self, text: str) -> bool:
        text = text or ""
        if text == self.filter_text:
            return False
        self.filter_text = text
        return True

    def update_total_pages(self, total: int) -> bool:
        """Record the store's page count; return True if the page had to move."""
        self.total_pages = max(1, int(total))
        if self.page > self.total_pages:
            self.page = self.total_pages
            return True
        return False


__all__ = ["QueryState"]
