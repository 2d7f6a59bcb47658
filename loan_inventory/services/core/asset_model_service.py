"""
Asset Model Service
Query building and count aggregation for asset model list views.
"""

from typing import Any, Dict, Optional
from flask import Request
from sqlalchemy import or_
from loan_inventory.buisness.core.asset_model_context import AssetModelContext
from loan_inventory.data.core.asset_info.asset_model import AssetModel
from loan_inventory.services.core.pagination import get_pagination_params, paginate, serialize_page


class AssetModelService:

    @staticmethod
    def build_filtered_query(search: Optional[str] = None, type_name: Optional[str] = None,
                             brand: Optional[str] = None):
        """
        Args:
            search: Partial match on brand or model name
            type_name: Exact equipment type
            brand: Partial match on brand

        Returns:
            SQLAlchemy query object
        """
        query = AssetModel.query

        if search:
            pattern = f'%{search.strip()}%'
            query = query.filter(or_(AssetModel.brand.ilike(pattern), AssetModel.model_name.ilike(pattern)))

        if type_name:
            query = query.filter(AssetModel.type == type_name)

        if brand:
            query = query.filter(AssetModel.brand.ilike(f'%{brand}%'))

        return query.order_by(AssetModel.type, AssetModel.brand, AssetModel.model_name)

    @staticmethod
    def get_list_data(request: Request) -> Dict[str, Any]:
        """
        Paginated models, each with its available item count and stock totals.
        """
        page, page_size = get_pagination_params(request)
        query = AssetModelService.build_filtered_query(
            search=request.args.get('search'),
            type_name=request.args.get('type'),
            brand=request.args.get('brand'),
        )
        return serialize_page(paginate(query, page, page_size),
                              lambda asset_model: AssetModelContext(asset_model).to_dict())
