"""
Asset Item Service
Query building and filtering for asset item list views.
"""

from typing import Any, Dict, Optional
from flask import Request
from sqlalchemy import or_
from loan_inventory.buisness.core.errors import ValidationError
from loan_inventory.data.core.asset_info.asset_item import AssetItem
from loan_inventory.data.core.constants import AssetStatus
from loan_inventory.services.core.pagination import get_pagination_params, paginate, serialize_page


class AssetItemService:

    @staticmethod
    def build_filtered_query(search: Optional[str] = None, status: Optional[str] = None,
                             asset_model_id: Optional[int] = None):
        """
        Args:
            search: Partial match on asset tag or serial number
            status: One of AssetStatus.ALL
            asset_model_id: Restrict to one model

        Returns:
            SQLAlchemy query object
        """
        query = AssetItem.query

        if search:
            pattern = f'%{search.strip()}%'
            query = query.filter(or_(AssetItem.asset_tag.ilike(pattern), AssetItem.serial.ilike(pattern)))

        if status:
            if status not in AssetStatus.ALL:
                raise ValidationError(f"Statut invalide. Valeurs acceptées : {', '.join(AssetStatus.ALL)}")
            query = query.filter(AssetItem.status == status)

        if asset_model_id:
            query = query.filter(AssetItem.asset_model_id == asset_model_id)

        return query.order_by(AssetItem.created_at.desc(), AssetItem.id.desc())

    @staticmethod
    def get_list_data(request: Request) -> Dict[str, Any]:
        page, page_size = get_pagination_params(request)
        query = AssetItemService.build_filtered_query(
            search=request.args.get('search'),
            status=request.args.get('status'),
            asset_model_id=request.args.get('asset_model_id', type=int),
        )
        return serialize_page(paginate(query, page, page_size),
                              lambda item: item.to_dict(include_relationships=['asset_model']))
