#!/usr/bin/env python3
"""
Build orchestrator for the loan inventory
Creates the tables, inserts critical data and, optionally, debug data
"""

import os
from loan_inventory import create_app, db
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.build")


def verify_critical_data():
    """
    Verify that critical data is present in the database

    Returns:
        bool: True if every default equipment type and at least one ADMIN exist
    """
    from loan_inventory.data.core.asset_info.equipment_type import EquipmentType
    from loan_inventory.data.core.constants import DEFAULT_EQUIPMENT_TYPES, Role
    from loan_inventory.data.core.user_info.user import User

    existing = {name for (name,) in db.session.query(EquipmentType.name).all()}
    missing = [name for name in DEFAULT_EQUIPMENT_TYPES if name not in existing]
    if missing:
        logger.warning(f"Missing equipment types: {missing}")
        return False

    if User.query.filter_by(role=Role.ADMIN).first() is None:
        logger.warning("No ADMIN account found")
        return False

    logger.info("Critical data verification passed")
    return True


def insert_critical_data():
    """
    Insert critical data that must always be present

    Equipment types come from DEFAULT_EQUIPMENT_TYPES; the first admin account
    from ADMIN_USER_EMAIL / ADMIN_USER_PASSWORD. Without those variables no
    admin is created and the first registered account becomes ADMIN instead.

    Raises:
        Exception: If critical data insertion fails (stops application)
    """
    from loan_inventory.buisness.core.user_context import UserContext
    from loan_inventory.data.core.asset_info.equipment_type import EquipmentType
    from loan_inventory.data.core.constants import DEFAULT_EQUIPMENT_TYPES, Role
    from loan_inventory.data.core.user_info.user import User

    if verify_critical_data():
        logger.info("Critical data already present, skipping insertion")
        return

    try:
        for name in DEFAULT_EQUIPMENT_TYPES:
            EquipmentType.find_or_create_from_dict({'name': name}, lookup_fields=['name'], commit=False)
        db.session.commit()
        logger.info(f"Ensured {len(DEFAULT_EQUIPMENT_TYPES)} default equipment types")

        admin_email = os.environ.get('ADMIN_USER_EMAIL')
        admin_password = os.environ.get('ADMIN_USER_PASSWORD')
        if User.query.filter_by(role=Role.ADMIN).first() is None:
            if admin_email and admin_password:
                UserContext.create(admin_email, admin_password, role=Role.ADMIN)
                logger.info(f"Created admin account {admin_email}")
            else:
                logger.warning("ADMIN_USER_EMAIL/ADMIN_USER_PASSWORD not set; "
                               "the first registered account will become ADMIN")
    except Exception as e:
        db.session.rollback()
        error_msg = f"Critical data insertion failed: {e}"
        logger.error(error_msg)
        raise Exception(error_msg)


def build_database(enable_debug_data=True, app=None):
    """
    Args:
        enable_debug_data (bool): Whether to insert debug data (default: True).
            Critical data is ALWAYS checked and inserted regardless of flags.
        app: Existing Flask app; a new one is created when omitted
    """
    app = app or create_app()

    with app.app_context():
        logger.info("Starting database build")
        db.create_all()
        logger.info("All database tables created")

        insert_critical_data()

        if enable_debug_data:
            from loan_inventory.debug.debug_data_manager import insert_debug_data
            logger.info("Inserting debug data...")
            insert_debug_data(enabled=True)

        logger.info("Database build completed successfully")


if __name__ == '__main__':
    build_database()
