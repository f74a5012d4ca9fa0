from flask import jsonify
from flask_login import login_required, current_user
from app.blueprints.staff import staff_bp
from app.blueprints.staff.forms import PickForm
from app.services.picking_service import PickingService
from app.exceptions import NotFound
from app.utils.forms import validate_form
from app.utils.permissions import staff_required


@staff_bp.route('/orders')
@login_required
@staff_required
def orders():
    """待认领订单"""
    return jsonify({
        'success': True,
        'orders': [o.to_dict() for o in PickingService.pending_orders()],
    })


@staff_bp.route('/orders/<int:order_id>/assign', methods=['POST'])
@login_required
@staff_required
def assign(order_id):
    order = PickingService.assign_order(order_id, current_user)
    if order is None:
        raise NotFound('订单不存在')
    return jsonify({'success': True, 'order': order.to_dict()})


@staff_bp.route('/orders/<int:order_id>/pick', methods=['POST'])
@login_required
@staff_required
def pick(order_id):
    """提交拣货（申请出库）"""
    form = validate_form(PickForm())
    record = PickingService.create_picking(order_id, current_user, form.shipping_notes.data)
    if record is None:
        raise NotFound('订单不存在')
    return jsonify({'success': True, 'picking': record.to_dict()}), 201


@staff_bp.route('/history')
@login_required
@staff_required
def history():
    """我的拣货历史"""
    return jsonify({
        'success': True,
        'history': PickingService.picking_history(current_user),
    })
