import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List


class Outcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


@dataclass
class Page:
    items: List[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def paginate(query, page: int, limit: int) -> Page:
    """Run an offset/limit query and its count"""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=items, total=total, page=page, limit=limit)


def paginate_list(items: List[Any], page: int, limit: int) -> Page:
    """Paginate rows that were filtered in Python"""
    start = (page - 1) * limit
    return Page(items=items[start:start + limit], total=len(items), page=page, limit=limit)


def apply_changes(instance, changes: dict):
    for field, value in changes.items():
        setattr(instance, field, value)
