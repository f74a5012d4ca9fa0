from datetime import datetime
from flask import request, jsonify
from flask_login import login_required, current_user
from app.blueprints.inventory import inventory_bp
from app.blueprints.inventory.forms import ProductForm, StockIncrementForm
from app.services.inventory_service import InventoryService
from app.services.stock_alert_service import StockAlertService
from app.services.document_store import DocumentStore
from app.exceptions import ValidationError, NotFound
from app.utils.forms import validate_form, submitted_data
from app.utils.permissions import admin_required


def _ledger_response(product, transaction, status=200):
    return jsonify({
        'success': True,
        'product': product.to_dict(),
        'transaction': transaction.to_dict() if transaction else None,
    }), status


@inventory_bp.route('/products')
@login_required
@admin_required
def products():
    """商品列表"""
    return jsonify({
        'success': True,
        'products': [p.to_dict() for p in InventoryService.list_products()],
    })


@inventory_bp.route('/products', methods=['POST'])
@login_required
@admin_required
def create_product():
    """新建商品（期初库存记入流水）"""
    form = validate_form(ProductForm())
    result = InventoryService.record_creation(
        name=form.name.data,
        description=form.description.data,
        price=form.price.data,
        quantity=form.quantity.data,
        image_url=form.image_url.data,
        image_file=form.image.data or None,
        staff=current_user,
    )
    if result is None:
        raise ValidationError('商品名称不能为空')
    return _ledger_response(*result, status=201)


@inventory_bp.route('/products/<int:product_id>/increment', methods=['POST'])
@login_required
@admin_required
def increment(product_id):
    """补货入库"""
    if DocumentStore().get_by_id('products', product_id) is None:
        raise NotFound('商品不存在')

    form = validate_form(StockIncrementForm())
    result = InventoryService.increment_stock(product_id, form.quantity.data, staff=current_user)
    if result is None:
        raise ValidationError('补货数量必须大于 0')
    return _ledger_response(*result)


@inventory_bp.route('/products/<int:product_id>', methods=['POST'])
@login_required
@admin_required
def edit(product_id):
    """编辑商品，库存差额记入流水"""
    form = validate_form(ProductForm())
    result = InventoryService.edit_product(
        product_id,
        submitted_data(form, ProductForm.FIELDS),
        image_file=form.image.data or None,
        staff=current_user,
    )
    if result is None:
        raise NotFound('商品不存在')
    return _ledger_response(*result)


@inventory_bp.route('/products/<int:product_id>/delete', methods=['POST'])
@login_required
@admin_required
def delete(product_id):
    deleted, transaction = InventoryService.delete_product(product_id, staff=current_user)
    if not deleted:
        raise NotFound('商品不存在')
    return jsonify({
        'success': True,
        'transaction': transaction.to_dict() if transaction else None,
    })


def _parse_datetime(name):
    value = request.args.get(name, '').strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f'日期格式错误: {name}', payload={name: value})


@inventory_bp.route('/transactions')
@login_required
@admin_required
def transactions():
    """库存流水（按时间倒序）"""
    move_type = request.args.get('type', 'all')
    if move_type not in ('all', 'stock_in', 'stock_out'):
        raise ValidationError('流水类型错误', payload={'type': move_type})

    history = InventoryService.list_transactions(
        search=request.args.get('q', '').strip(),
        move_type=move_type,
        start=_parse_datetime('start'),
        end=_parse_datetime('end'),
    )
    return jsonify({
        'success': True,
        'transactions': [t.to_dict() for t in history['items']],
        'total_in': history['total_in'],
        'total_out': history['total_out'],
    })


@inventory_bp.route('/alerts')
@login_required
@admin_required
def alerts():
    """库存预警"""
    items = StockAlertService.check_stock_alerts(search=request.args.get('q', ''))
    return jsonify({'success': True, 'alerts': items})
