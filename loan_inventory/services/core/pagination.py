"""
Pagination helpers
Reads page / page_size query parameters and serializes Flask-SQLAlchemy
Pagination objects into the API list format.
"""

from typing import Any, Callable, Dict, Tuple
from flask import Request
from flask_sqlalchemy.pagination import Pagination

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def get_pagination_params(request: Request) -> Tuple[int, int]:
    """
    Args:
        request: Flask request object

    Returns:
        Tuple of (page, page_size); invalid values fall back to the defaults,
        page_size is capped at MAX_PAGE_SIZE
    """
    page = request.args.get('page', 1, type=int) or 1
    page_size = request.args.get('page_size', DEFAULT_PAGE_SIZE, type=int) or DEFAULT_PAGE_SIZE
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    return page, page_size


def paginate(query, page: int, page_size: int) -> Pagination:
    return query.paginate(page=page, per_page=page_size, max_per_page=MAX_PAGE_SIZE, error_out=False)


def serialize_page(pagination: Pagination, serializer: Callable[[Any], Dict]) -> Dict[str, Any]:
    total_pages = pagination.pages
    return {
        'items': [serializer(item) for item in pagination.items],
        'pagination': {
            'page': pagination.page,
            'page_size': pagination.per_page,
            'total_items': pagination.total,
            'total_pages': total_pages,
            'has_next_page': pagination.page < total_pages,
            'has_previous_page': pagination.page > 1,
        },
    }
