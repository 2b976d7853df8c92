"""Pagination helpers shared by the listing services."""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class Page:
    """One page of a filtered, sorted listing."""

    items: List[Any]
    total: int
    page: int
    limit: int
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


def paginate(query, page: int, limit: int, **extra) -> Page:
    """
    Apply OFFSET/LIMIT to an already filtered and ordered query.

    The count is taken on the same query before slicing, so `total`
    reflects every matching row.
    """
    total = query.order_by(None).count()
    offset = (page - 1) * limit
    items = query.offset(offset).limit(limit).all()
    return Page(items=items, total=total, page=page, limit=limit, extra=extra)
