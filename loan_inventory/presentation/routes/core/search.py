"""
Global search and autocomplete routes
"""

from flask import Blueprint, request
from flask_login import login_required
from loan_inventory.presentation.routes.responses import query_int, success
from loan_inventory.services.core.search_service import SearchService

bp = Blueprint('search', __name__)


@bp.route('/search', methods=['GET'])
@login_required
def global_search():
    return success(SearchService.global_search(request.args.get('q'), query_int('limit')))


@bp.route('/search/autocomplete/employees', methods=['GET'])
@login_required
def autocomplete_employees():
    return success(SearchService.autocomplete_employees(request.args.get('q'), query_int('limit')))


@bp.route('/search/autocomplete/asset-items', methods=['GET'])
@login_required
def autocomplete_asset_items():
    available_only = request.args.get('available_only', 'true').lower() != 'false'
    return success(SearchService.autocomplete_asset_items(request.args.get('q'), query_int('limit'),
                                                          available_only=available_only))


@bp.route('/search/autocomplete/asset-models', methods=['GET'])
@login_required
def autocomplete_asset_models():
    return success(SearchService.autocomplete_asset_models(request.args.get('q'), query_int('limit')))
