"""Pagination helpers for rule listings, with a hard page-size cap."""

from __future__ import annotations

import os
from typing import Optional

from fastapi import Response


DEFAULT_MAX_PAGE_SIZE = 200


def get_max_page_size() -> int:
    raw = os.getenv("API_MAX_PAGE_SIZE", str(DEFAULT_MAX_PAGE_SIZE))
    try:
        val = int(raw)
    except ValueError:
        val = DEFAULT_MAX_PAGE_SIZE
    if val < 1:
        return DEFAULT_MAX_PAGE_SIZE
    return val


def clamp_page_size(page_size: int) -> int:
    return max(1, min(page_size, get_max_page_size()))


def clamp_limit(limit: int) -> int:
    return clamp_page_size(limit)


def page_offset(page: int, page_size: int) -> int:
    return (max(page, 1) - 1) * page_size


def set_pagination_headers(
    response: Optional[Response],
    *,
    total: Optional[int],
    page: int,
    page_size: int,
) -> None:
    if not response:
        return
    if total is not None:
        response.headers["X-Total-Count"] = str(total)
    response.headers["X-Page"] = str(page)
    response.headers["X-Page-Size"] = str(page_size)
