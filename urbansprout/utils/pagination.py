"""Pagination utilities"""

from math import ceil


def page_window(page: int, limit: int) -> int:
    """Number of documents to skip for a 1-indexed page"""
    return (page - 1) * limit


def page_meta(total: int, page: int, limit: int) -> dict:
    """
    Build pagination metadata for a query result

    Args:
        total: Total number of matching documents
        page: Current page number (1-indexed)
        limit: Number of items per page

    Returns:
        Dictionary with pagination data
    """
    pages = ceil(total / limit) if total > 0 else 0

    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": pages,
        "has_next_page": page < pages,
        "has_prev_page": page > 1,
    }
