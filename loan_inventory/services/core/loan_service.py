"""
Loan Service
Query building for loan list views. Soft-deleted loans never appear.
"""

from typing import Any, Dict, Optional
from flask import Request
from loan_inventory.buisness.core.errors import ValidationError
from loan_inventory.buisness.core.loan_context import LoanContext
from loan_inventory.data.core.constants import LoanStatus
from loan_inventory.data.core.loan_info.loan import Loan
from loan_inventory.services.core.pagination import get_pagination_params, paginate, serialize_page


class LoanService:

    @staticmethod
    def build_filtered_query(status: Optional[str] = None, employee_id: Optional[int] = None):
        """
        Args:
            status: OPEN or CLOSED
            employee_id: Restrict to one employee

        Returns:
            SQLAlchemy query object, newest loans first
        """
        query = Loan.query.filter(Loan.deleted_at.is_(None))

        if status:
            if status not in LoanStatus.ALL:
                raise ValidationError(f"Statut invalide. Valeurs acceptées : {', '.join(LoanStatus.ALL)}")
            query = query.filter(Loan.status == status)

        if employee_id:
            query = query.filter(Loan.employee_id == employee_id)

        return query.order_by(Loan.opened_at.desc(), Loan.id.desc())

    @staticmethod
    def get_list_data(request: Request) -> Dict[str, Any]:
        page, page_size = get_pagination_params(request)
        query = LoanService.build_filtered_query(
            status=request.args.get('status'),
            employee_id=request.args.get('employee_id', type=int),
        )
        return serialize_page(paginate(query, page, page_size), lambda loan: LoanContext(loan).to_dict())
