#!/usr/bin/env python3
"""
Debug Data Manager
Inserts sample users, employees and catalogue entries for local development

Handles:
- Loading debug/data/debug_data.json
- Skipping insertion when the data is already present
- Inserting through the business contexts so audit entries and tags are produced
"""

import json
from pathlib import Path
from loan_inventory import db
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.debug_data_manager")

DEBUG_DATA_FILE = Path(__file__).parent / 'data' / 'debug_data.json'


def _load_debug_data_file():
    if not DEBUG_DATA_FILE.exists():
        logger.warning(f"Debug data file not found: {DEBUG_DATA_FILE}")
        return None
    with open(DEBUG_DATA_FILE, 'r', encoding='utf-8') as f:
        return json.load(f)


def _check_debug_data_present(debug_data):
    from loan_inventory.data.core.employee import Employee

    emails = [row['email'] for row in debug_data.get('Employees', []) if row.get('email')]
    if not emails:
        return False
    return Employee.query.filter(Employee.email.in_(emails)).first() is not None


def insert_debug_data(enabled=True):
    """
    Insert debug data

    Returns:
        dict: Summary of inserted data

    Raises:
        Exception: If any debug data insertion fails (fail-fast)
    """
    from loan_inventory.buisness.core.asset_model_context import AssetModelContext
    from loan_inventory.buisness.core.employee_context import EmployeeContext
    from loan_inventory.buisness.core.user_context import UserContext
    from loan_inventory.data.core.constants import Role
    from loan_inventory.data.core.user_info.user import User

    if not enabled:
        logger.info("Debug data insertion is disabled")
        return {}

    debug_data = _load_debug_data_file()
    if not debug_data:
        return {'status': 'skipped', 'reason': 'file_not_found'}
    if _check_debug_data_present(debug_data):
        logger.info("Debug data already present, skipping")
        return {'status': 'skipped', 'reason': 'data_present'}

    admin = User.query.filter_by(role=Role.ADMIN).first()
    admin_id = admin.id if admin else None
    summary = {'users': 0, 'employees': 0, 'asset_models': 0}

    try:
        for row in debug_data.get('Users', []):
            if User.query.filter_by(email=row['email']).first() is None:
                UserContext.create(row['email'], row['password'], role=row.get('role'), created_by_id=admin_id)
                summary['users'] += 1

        result = EmployeeContext.bulk_create(debug_data.get('Employees', []), created_by_id=admin_id)
        summary['employees'] = result['created']

        for row in debug_data.get('Asset_Models', []):
            AssetModelContext.create(row, created_by_id=admin_id)
            summary['asset_models'] += 1
    except Exception as e:
        logger.error(f"Failed to insert debug data: {e}")
        db.session.rollback()
        raise

    logger.info(f"Debug data insertion completed: {summary}")
    return summary
