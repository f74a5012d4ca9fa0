from flask import jsonify
from flask_login import login_required

from . import main_bp
from app.services.report_service import ReportService
from app.utils.permissions import admin_required


@main_bp.route('/overview')
@login_required
@admin_required
def overview():
    """管理后台总览"""
    stats = ReportService.get_overview_stats()
    return jsonify({'success': True, 'stats': stats})


@main_bp.route('/health')
def health():
    return jsonify({'success': True, 'status': 'ok'})
