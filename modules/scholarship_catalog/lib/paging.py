from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def total_pages(n: int, page_size: int) -> int:
    """Number of pages for `n` items; never less than 1."""
    if page_size <= 0:
        raise ValueError("page_size must be >= 1")
    return max(1, math.ceil(n / page_size))


def slice_page(filtered: Sequence[T], page: int, page_size: int) -> list[T]:
    """Items on 1-based `page`; empty when the page is out of range."""
    if page_size <= 0:
        raise ValueError("page_size must be >= 1")
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(filtered[start : start + page_size])


def visible_range(page: int, page_size: int, n: int) -> tuple[int, int]:
    """1-based (first, last) item numbers shown on `page`; (0, 0) when nothing is shown."""
    start = (page - 1) * page_size
    if n <= 0 or start >= n:
        return (0, 0)
    return (start + 1, min(start + page_size, n))


def page_numbers(current: int, total: int) -> list[int | None]:
    """
    Page buttons to show: first, last, and current +/- 1.
    None marks a gap between non-adjacent pages.
    """
    shown = [p for p in range(1, total + 1) if p in (1, total) or abs(p - current) <= 1]
    out: list[int | None] = []
    for i, p in enumerate(shown):
        if i > 0 and shown[i - 1] != p - 1:
            out.append(None)
        out.append(p)
    return out


class PageWindow:
    """Current page of the filtered result; page size is fixed."""

    def __init__(self, page_size: int = 15) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be >= 1")
        self.page_size = page_size
        self.current_page = 1

    def reset(self) -> None:
        self.current_page = 1

    def go_to(self, page: int, total: int) -> int:
        self.current_page = min(max(1, int(page)), max(1, total))
        return self.current_page

    def next(self, total: int) -> int:
        return self.go_to(self.current_page + 1, total)

    def previous(self) -> int:
        self.current_page = max(1, self.current_page - 1)
        return self.current_page

    def clamp(self, total: int) -> int:
        """Pull the page back into [1, total] after the result shrank."""
        return self.go_to(self.current_page, total)
