"""
Dashboard Service
Aggregated inventory statistics for the dashboard.

Handles:
- Counting employees, assets, loans and stock levels
- Keeping the statistics in a short-lived in-process cache
- Recent loans and low stock lists
"""

import time
from threading import Lock
from typing import Any, Dict, List, Optional
from flask import current_app
from sqlalchemy import func
from loan_inventory import db
from loan_inventory.buisness.core.loan_context import LoanContext
from loan_inventory.data.core.asset_info.asset_item import AssetItem
from loan_inventory.data.core.asset_info.stock_item import StockItem
from loan_inventory.data.core.constants import AssetStatus, LoanStatus
from loan_inventory.data.core.employee import Employee
from loan_inventory.data.core.loan_info.loan import Loan
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.services.core.dashboard_service")

MAX_RECENT_LOANS = 50


class DashboardService:
    """
    Service for dashboard data.

    Statistics are computed at most once per DASHBOARD_CACHE_SECONDS;
    refresh() drops the cached value.
    """

    _cache: Optional[Dict[str, Any]] = None
    _cached_at: float = 0.0
    _lock = Lock()

    @staticmethod
    def compute_stats() -> Dict[str, Any]:
        threshold = current_app.config['LOW_STOCK_THRESHOLD']
        available = StockItem.quantity - StockItem.loaned

        status_counts = dict(
            db.session.query(AssetItem.status, func.count(AssetItem.id)).group_by(AssetItem.status).all()
        )

        return {
            'total_employees': Employee.query.count(),
            'total_assets': sum(status_counts.values()),
            'available_assets': status_counts.get(AssetStatus.EN_STOCK, 0),
            'loaned_assets': status_counts.get(AssetStatus.PRETE, 0),
            'active_loans': Loan.query.filter(
                Loan.status == LoanStatus.OPEN, Loan.deleted_at.is_(None)
            ).count(),
            'low_stock_items': StockItem.query.filter(available > 0, available <= threshold).count(),
            'out_of_stock_items': StockItem.query.filter(available <= 0).count(),
        }

    @classmethod
    def get_stats(cls) -> Dict[str, Any]:
        max_age = current_app.config['DASHBOARD_CACHE_SECONDS']
        with cls._lock:
            if cls._cache is not None and time.monotonic() - cls._cached_at < max_age:
                return cls._cache

        stats = cls.compute_stats()
        with cls._lock:
            cls._cache = stats
            cls._cached_at = time.monotonic()
        logger.debug("Dashboard statistics recomputed")
        return stats

    @classmethod
    def refresh(cls) -> Dict[str, Any]:
        """Drop the cached statistics and recompute them"""
        with cls._lock:
            cls._cache = None
            cls._cached_at = 0.0
        logger.info("Dashboard statistics cache cleared")
        return cls.get_stats()

    @staticmethod
    def recent_loans(limit: int = 10) -> List[Dict[str, Any]]:
        """
        Args:
            limit: Number of loans, capped at MAX_RECENT_LOANS

        Returns:
            Newest non-deleted loans, serialized
        """
        limit = min(max(limit, 1), MAX_RECENT_LOANS)
        loans = (Loan.query.filter(Loan.deleted_at.is_(None))
                 .order_by(Loan.opened_at.desc(), Loan.id.desc())
                 .limit(limit).all())
        return [LoanContext(loan).to_dict() for loan in loans]

    @staticmethod
    def low_stock(threshold: Optional[int] = None) -> List[Dict[str, Any]]:
        if threshold is None:
            threshold = current_app.config['LOW_STOCK_THRESHOLD']
        available = StockItem.quantity - StockItem.loaned
        items = StockItem.query.filter(available <= threshold).order_by(available, StockItem.id).all()
        return [item.to_dict(include_relationships=['asset_model']) for item in items]
