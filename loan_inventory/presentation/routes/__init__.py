"""
Routes package for the loan inventory API
Every JSON blueprint is mounted under /api; signature files under /uploads.
"""

from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .core import (
        asset_items, asset_models, audit_logs, dashboard, employees, equipment_types,
        health, loans, search, stock_items, uploads, users
    )

    for module in (users, employees, equipment_types, asset_models, asset_items,
                   stock_items, loans, dashboard, search, audit_logs, health):
        app.register_blueprint(module.bp, url_prefix='/api')

    app.register_blueprint(uploads.bp)

    logger.info("Route blueprints registered")
