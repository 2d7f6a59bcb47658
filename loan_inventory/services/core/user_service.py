"""
User Service
Query building for the user administration list.
"""

from typing import Any, Dict, Optional
from flask import Request
from loan_inventory.data.core.user_info.user import User
from loan_inventory.services.core.pagination import get_pagination_params, paginate, serialize_page


class UserService:

    @staticmethod
    def build_filtered_query(search: Optional[str] = None, role: Optional[str] = None):
        query = User.query

        if search:
            query = query.filter(User.email.ilike(f'%{search.strip()}%'))

        if role:
            query = query.filter(User.role == role)

        return query.order_by(User.email)

    @staticmethod
    def get_list_data(request: Request) -> Dict[str, Any]:
        page, page_size = get_pagination_params(request)
        query = UserService.build_filtered_query(
            search=request.args.get('search'),
            role=request.args.get('role'),
        )
        return serialize_page(paginate(query, page, page_size), lambda user: user.to_dict())
