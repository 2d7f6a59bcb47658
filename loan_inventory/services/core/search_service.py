"""
Search Service
Global search and autocomplete across employees and the equipment catalogue.
"""

from typing import Any, Dict, List
from sqlalchemy import or_
from loan_inventory.buisness.core.errors import ValidationError
from loan_inventory.data.core.asset_info.asset_item import AssetItem
from loan_inventory.data.core.asset_info.asset_model import AssetModel
from loan_inventory.data.core.asset_info.stock_item import StockItem
from loan_inventory.data.core.constants import AssetStatus
from loan_inventory.data.core.employee import Employee

MIN_QUERY_LENGTH = 2
SEARCH_MAX_LIMIT = 50
AUTOCOMPLETE_MAX_LIMIT = 20


def _clamp(limit, maximum: int, default: int = 10) -> int:
    if limit is None:
        return default
    return min(max(int(limit), 1), maximum)


def _model_summary(asset_model: AssetModel) -> Dict[str, Any]:
    return {
        'id': asset_model.id,
        'type': asset_model.type,
        'brand': asset_model.brand,
        'model_name': asset_model.model_name,
    }


def _employee_summary(employee: Employee) -> Dict[str, Any]:
    return {
        'id': employee.id,
        'first_name': employee.first_name,
        'last_name': employee.last_name,
        'email': employee.email,
        'dept': employee.dept,
    }


class SearchService:

    @staticmethod
    def _employee_query(term: str):
        pattern = f'%{term}%'
        return (Employee.query
                .filter(or_(Employee.first_name.ilike(pattern),
                            Employee.last_name.ilike(pattern),
                            Employee.email.ilike(pattern)))
                .order_by(Employee.last_name, Employee.first_name))

    @staticmethod
    def _asset_model_query(term: str):
        pattern = f'%{term}%'
        return (AssetModel.query
                .filter(or_(AssetModel.type.ilike(pattern),
                            AssetModel.brand.ilike(pattern),
                            AssetModel.model_name.ilike(pattern)))
                .order_by(AssetModel.type, AssetModel.brand))

    @staticmethod
    def global_search(query: str, limit=None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Search every category with a case-insensitive partial match.

        Args:
            query: Search text, at least MIN_QUERY_LENGTH characters once trimmed
            limit: Max results per category (default 10, capped at SEARCH_MAX_LIMIT)

        Returns:
            Dict with employees, asset_items, asset_models and stock_items lists

        Raises:
            ValidationError: Query too short
        """
        term = (query or '').strip()
        if len(term) < MIN_QUERY_LENGTH:
            raise ValidationError('La recherche doit contenir au moins 2 caractères')
        limit = _clamp(limit, SEARCH_MAX_LIMIT)
        pattern = f'%{term}%'

        model_match = or_(AssetModel.brand.ilike(pattern),
                          AssetModel.model_name.ilike(pattern),
                          AssetModel.type.ilike(pattern))

        asset_items = (AssetItem.query.join(AssetModel, AssetItem.asset_model_id == AssetModel.id)
                       .filter(or_(AssetItem.asset_tag.ilike(pattern),
                                   AssetItem.serial.ilike(pattern),
                                   AssetItem.notes.ilike(pattern),
                                   model_match))
                       .order_by(AssetItem.asset_tag)
                       .limit(limit).all())

        stock_items = (StockItem.query.join(AssetModel, StockItem.asset_model_id == AssetModel.id)
                       .filter(or_(StockItem.notes.ilike(pattern), model_match))
                       .order_by(AssetModel.brand, AssetModel.model_name)
                       .limit(limit).all())

        return {
            'employees': [_employee_summary(e) for e in SearchService._employee_query(term).limit(limit).all()],
            'asset_items': [
                {
                    'id': item.id,
                    'asset_tag': item.asset_tag,
                    'serial': item.serial,
                    'status': item.status,
                    'notes': item.notes,
                    'asset_model': _model_summary(item.asset_model),
                }
                for item in asset_items
            ],
            'asset_models': [
                _model_summary(m) for m in SearchService._asset_model_query(term).limit(limit).all()
            ],
            'stock_items': [
                {
                    'id': stock.id,
                    'quantity': stock.quantity,
                    'loaned': stock.loaned,
                    'available': stock.available,
                    'notes': stock.notes,
                    'asset_model': _model_summary(stock.asset_model),
                }
                for stock in stock_items
            ],
        }

    @staticmethod
    def autocomplete_employees(query: str, limit=None) -> List[Dict[str, Any]]:
        term = (query or '').strip()
        if len(term) < MIN_QUERY_LENGTH:
            return []
        employees = SearchService._employee_query(term).limit(_clamp(limit, AUTOCOMPLETE_MAX_LIMIT)).all()
        return [_employee_summary(e) for e in employees]

    @staticmethod
    def autocomplete_asset_items(query: str, limit=None, available_only: bool = True) -> List[Dict[str, Any]]:
        """Items matching by tag or serial; only EN_STOCK items unless available_only is False"""
        term = (query or '').strip()
        if len(term) < MIN_QUERY_LENGTH:
            return []
        pattern = f'%{term}%'
        query_obj = AssetItem.query.filter(or_(AssetItem.asset_tag.ilike(pattern), AssetItem.serial.ilike(pattern)))
        if available_only:
            query_obj = query_obj.filter(AssetItem.status == AssetStatus.EN_STOCK)
        items = query_obj.order_by(AssetItem.asset_tag).limit(_clamp(limit, AUTOCOMPLETE_MAX_LIMIT)).all()
        return [
            {
                'id': item.id,
                'asset_tag': item.asset_tag,
                'serial': item.serial,
                'status': item.status,
                'asset_model': _model_summary(item.asset_model),
            }
            for item in items
        ]

    @staticmethod
    def autocomplete_asset_models(query: str, limit=None) -> List[Dict[str, Any]]:
        term = (query or '').strip()
        if len(term) < MIN_QUERY_LENGTH:
            return []
        models = SearchService._asset_model_query(term).limit(_clamp(limit, AUTOCOMPLETE_MAX_LIMIT)).all()
        return [_model_summary(m) for m in models]
