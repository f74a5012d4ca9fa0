from flask import jsonify
from flask_login import login_required, current_user
from app.blueprints.picking import picking_bp
from app.blueprints.picking.forms import ShippingForm
from app.services.picking_service import PickingService
from app.exceptions import NotFound
from app.utils.forms import validate_form
from app.utils.permissions import admin_required


@picking_bp.route('/')
@login_required
@admin_required
def index():
    """拣货单列表"""
    return jsonify({
        'success': True,
        'picking': [r.to_dict() for r in PickingService.list_picking()],
    })


@picking_bp.route('/orders')
@login_required
@admin_required
def active_orders():
    """未签收的订单"""
    return jsonify({
        'success': True,
        'orders': [o.to_dict() for o in PickingService.active_orders()],
    })


@picking_bp.route('/<int:picking_id>/shipment', methods=['POST'])
@login_required
@admin_required
def shipment(picking_id):
    """填写物流单号并发货（首次发货扣减库存）"""
    form = validate_form(ShippingForm())
    result = PickingService.commit_shipment(
        picking_id,
        form.tracking_number.data,
        form.shipping_method.data,
        staff=current_user,
    )
    if result is None:
        raise NotFound('拣货单不存在')

    payload = result.to_dict()
    payload['success'] = True
    payload['shortages'] = [o.to_dict() for o in result.shortages]
    return jsonify(payload)


@picking_bp.route('/<int:picking_id>/deliver', methods=['POST'])
@login_required
@admin_required
def deliver(picking_id):
    """确认签收"""
    record = PickingService.commit_delivery(picking_id)
    if record is None:
        raise NotFound('拣货单不存在')
    return jsonify({'success': True, 'picking': record.to_dict()})
