"""
Core models package for the loan inventory
"""

from .user_info.user import User
from .employee import Employee
from .asset_info.equipment_type import EquipmentType
from .asset_info.asset_model import AssetModel
from .asset_info.asset_item import AssetItem
from .asset_info.stock_item import StockItem
from .loan_info.loan import Loan
from .loan_info.loan_line import LoanLine
from .audit_log import AuditLog

__all__ = [
    'User',
    'Employee',
    'EquipmentType',
    'AssetModel',
    'AssetItem',
    'StockItem',
    'Loan',
    'LoanLine',
    'AuditLog',
]
