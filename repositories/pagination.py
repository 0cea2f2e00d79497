import config
from models.filters import PageFilter


def apply_page(stmt, page: PageFilter | None, default_limit: int | None = None):
    """
    Apply offset/limit from a filter.

    limit/offset follow range(offset, offset + limit - 1); a missing limit
    falls back to default_limit, then to PAGE_ENTRIES.
    """
    offset = page.offset if page else 0
    limit = page.limit if page and page.limit is not None else (default_limit or config.PAGE_ENTRIES)
    return stmt.offset(offset).limit(limit)
