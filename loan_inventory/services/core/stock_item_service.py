"""
Stock Item Service
Query building and filtering for consumable stock list views.
"""

from typing import Any, Dict, Optional
from flask import Request, current_app
from sqlalchemy import or_
from loan_inventory.data.core.asset_info.asset_model import AssetModel
from loan_inventory.data.core.asset_info.stock_item import StockItem
from loan_inventory.services.core.pagination import get_pagination_params, paginate, serialize_page


class StockItemService:

    @staticmethod
    def build_filtered_query(search: Optional[str] = None, asset_model_id: Optional[int] = None,
                             low_stock: bool = False, threshold: int = 5):
        """
        Args:
            search: Partial match on the model brand or name
            asset_model_id: Restrict to one model
            low_stock: Only items whose available quantity is at or below threshold
            threshold: Low stock threshold

        Returns:
            SQLAlchemy query object
        """
        query = StockItem.query.join(AssetModel, StockItem.asset_model_id == AssetModel.id)

        if search:
            pattern = f'%{search.strip()}%'
            query = query.filter(or_(AssetModel.brand.ilike(pattern), AssetModel.model_name.ilike(pattern)))

        if asset_model_id:
            query = query.filter(StockItem.asset_model_id == asset_model_id)

        if low_stock:
            query = query.filter(StockItem.quantity - StockItem.loaned <= threshold)

        return query.order_by(AssetModel.brand, AssetModel.model_name, StockItem.id)

    @staticmethod
    def get_list_data(request: Request) -> Dict[str, Any]:
        page, page_size = get_pagination_params(request)
        low_stock = (request.args.get('low_stock') or '').lower() in ('true', '1', 'yes')
        query = StockItemService.build_filtered_query(
            search=request.args.get('search'),
            asset_model_id=request.args.get('asset_model_id', type=int),
            low_stock=low_stock,
            threshold=current_app.config['LOW_STOCK_THRESHOLD'],
        )
        return serialize_page(paginate(query, page, page_size),
                              lambda stock: stock.to_dict(include_relationships=['asset_model']))
