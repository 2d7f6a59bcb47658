"""
Employee Service
Query building and filtering for employee list views.
"""

from typing import Any, Dict, Optional
from flask import Request
from sqlalchemy import or_
from loan_inventory.data.core.employee import Employee
from loan_inventory.services.core.pagination import get_pagination_params, paginate, serialize_page


class EmployeeService:

    @staticmethod
    def build_filtered_query(search: Optional[str] = None, dept: Optional[str] = None):
        """
        Build a filtered employee query.

        Args:
            search: Partial match on first name, last name, email or department
            dept: Exact department

        Returns:
            SQLAlchemy query object
        """
        query = Employee.query

        if search:
            pattern = f'%{search.strip()}%'
            query = query.filter(or_(
                Employee.first_name.ilike(pattern),
                Employee.last_name.ilike(pattern),
                Employee.email.ilike(pattern),
                Employee.dept.ilike(pattern),
            ))

        if dept:
            query = query.filter(Employee.dept == dept)

        return query.order_by(Employee.last_name, Employee.first_name, Employee.id)

    @staticmethod
    def get_list_data(request: Request) -> Dict[str, Any]:
        """
        Get the paginated employee list with filters applied.

        Args:
            request: Flask request object

        Returns:
            {'items': [...], 'pagination': {...}}
        """
        page, page_size = get_pagination_params(request)
        query = EmployeeService.build_filtered_query(
            search=request.args.get('search'),
            dept=request.args.get('dept'),
        )
        return serialize_page(paginate(query, page, page_size), lambda employee: employee.to_dict())
