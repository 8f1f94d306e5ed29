from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.orm import Query

from teamdocs.utils.rates import total_pages

MAX_PAGE_SIZE = 500


def paginate(query: Query, *, page: int, limit: int) -> Dict[str, Any]:
    """Count then slice an ordered query; a page past the end yields no items."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "items": items,
        "total": total,
        "total_pages": total_pages(total, limit),
        "current_page": page,
    }
