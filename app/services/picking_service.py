"""拣货与发货服务 - 发货时扣减库存并记录出库流水"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from flask import current_app
from app.extensions import db
from app.models.auth import User
from app.models.trade import Order
from app.models.picking import PickingRecord
from app.models.stock import StockTransaction
from app.services.document_store import DocumentStore
from app.services.inventory_service import append_transaction
from app.exceptions import ValidationError
from app.utils.validators import to_int


@dataclass
class ItemOutcome:
    """单个订单行的扣减结果"""
    APPLIED = 'applied'
    INSUFFICIENT_STOCK = 'insufficient_stock'
    PRODUCT_NOT_FOUND = 'product_not_found'
    INVALID_QUANTITY = 'invalid_quantity'

    product_id: object
    product_name: str
    status: str
    requested: int = 0
    available: Optional[int] = None
    remaining_stock: Optional[int] = None

    def to_dict(self):
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'status': self.status,
            'requested': self.requested,
            'available': self.available,
            'remaining_stock': self.remaining_stock,
        }


@dataclass
class ShipmentResult:
    picking_id: int
    order_id: int
    status: str
    dispatched: bool = False
    already_committed: bool = False
    items: List[ItemOutcome] = field(default_factory=list)

    @property
    def shortages(self):
        return [o for o in self.items if o.status == ItemOutcome.INSUFFICIENT_STOCK]

    @property
    def fully_applied(self):
        return all(o.status == ItemOutcome.APPLIED for o in self.items)

    def to_dict(self):
        return {
            'picking_id': self.picking_id,
            'order_id': self.order_id,
            'status': self.status,
            'dispatched': self.dispatched,
            'already_committed': self.already_committed,
            'items': [o.to_dict() for o in self.items],
        }


class PickingService:
    @staticmethod
    def commit_shipment(picking_id, tracking_number, shipping_method='', staff: User = None,
                        store: DocumentStore = None) -> Optional[ShipmentResult]:
        """
        保存物流信息
        单号为空：只保存物流字段，状态回到待处理，不动库存
        单号非空：拣货单 -> 已发货，订单 -> 配送中，并逐行扣减库存（每张拣货单只扣一次）
        已签收的拣货单不可再修改；已扣减库存的拣货单不可清空单号
        整个过程在同一事务内提交，任何异常整体回滚
        """
        store = store or DocumentStore()
        # 行锁保证并发提交时只有一个事务能看到未扣减状态
        record = store.get_by_id('picking', picking_id, for_update=True)
        if record is None:
            return None

        tracking_number = (tracking_number or '').strip()
        shipping_method = (shipping_method or '').strip()

        if record.status == PickingRecord.STATUS_DELIVERED:
            db.session.rollback()
            raise ValidationError('拣货单已签收，不能修改物流信息', payload={'status': record.status})
        if not tracking_number and record.stock_committed:
            db.session.rollback()
            raise ValidationError('拣货单已发货，物流单号不能为空', payload={'status': record.status})

        try:
            if not tracking_number:
                store.update('picking', record.id, {
                    'tracking_number': '',
                    'shipping_method': shipping_method,
                    'status': PickingRecord.STATUS_PENDING,
                })
                db.session.commit()
                return ShipmentResult(record.id, record.order_id, record.status)

            store.update('picking', record.id, {
                'tracking_number': tracking_number,
                'shipping_method': shipping_method,
                'status': PickingRecord.STATUS_DISPATCHED,
            })
            store.update('orders', record.order_id, {
                'tracking_number': tracking_number,
                'shipping_method': shipping_method,
                'status': Order.STATUS_SHIPPING,
            })

            result = ShipmentResult(record.id, record.order_id, record.status, dispatched=True)

            if record.stock_committed:
                # 库存已在首次发货时扣减
                result.already_committed = True
                current_app.logger.info(f'拣货单 #{record.id} 已扣减过库存，仅更新物流信息')
            else:
                for item in record.items or []:
                    result.items.append(
                        PickingService._ship_item(store, item, record.order_id, staff)
                    )
                store.update('picking', record.id, {'stock_committed_at': datetime.utcnow()})

            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 保存发货信息失败 (拣货单 {picking_id}): {e}')
            raise

        return result

    @staticmethod
    def _ship_item(store, item, order_id, staff):
        product_id = item.get('id')
        name = item.get('name', '')
        requested = to_int(item.get('quantity'))

        product = store.get_by_id('products', product_id)
        if product is None:
            current_app.logger.debug(f'订单 {order_id} 的商品 {product_id} 不存在，跳过')
            return ItemOutcome(product_id, name, ItemOutcome.PRODUCT_NOT_FOUND, requested)

        current_quantity = product.quantity or 0
        if requested <= 0:
            return ItemOutcome(product_id, name, ItemOutcome.INVALID_QUANTITY, requested,
                               available=current_quantity)

        new_quantity = current_quantity - requested
        if new_quantity < 0:
            current_app.logger.warning(
                f'⚠️ สต็อกไม่พอสำหรับ {name}: มี {current_quantity}, ต้องการ {requested}'
            )
            return ItemOutcome(product_id, name, ItemOutcome.INSUFFICIENT_STOCK, requested,
                               available=current_quantity)

        store.update('products', product.id, {'quantity': new_quantity})
        append_transaction(
            store, StockTransaction.TYPE_OUT, product.id, name,
            quantity=-requested,
            remaining_stock=new_quantity,
            reason=f'จัดส่งออเดอร์ {order_id}',
            reference_id=order_id,
            staff=staff,
        )
        current_app.logger.info(f'ลดสต็อก {name}: {current_quantity} → {new_quantity}')
        return ItemOutcome(product_id, name, ItemOutcome.APPLIED, requested,
                           available=current_quantity, remaining_stock=new_quantity)

    @staticmethod
    def commit_delivery(picking_id, store: DocumentStore = None):
        """
        确认签收：订单与拣货单 -> 已签收，不涉及库存
        只有已发货（库存已扣减）的拣货单可以确认签收
        """
        store = store or DocumentStore()
        record = store.get_by_id('picking', picking_id, for_update=True)
        if record is None:
            return None
        if record.status != PickingRecord.STATUS_DISPATCHED:
            db.session.rollback()
            raise ValidationError('拣货单尚未发货，不能确认签收', payload={'status': record.status})

        try:
            store.update('orders', record.order_id, {'status': Order.STATUS_DELIVERED})
            store.update('picking', record.id, {'status': PickingRecord.STATUS_DELIVERED})
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 确认签收失败 (拣货单 {picking_id}): {e}')
            raise

        return record

    # ============== 员工拣货 ==============

    @staticmethod
    def create_picking(order_id, staff: User, shipping_notes='', store: DocumentStore = None):
        """
        员工提交拣货：生成拣货单（申请出库），订单转为处理中
        库存在管理员填写物流单号时才扣减
        """
        store = store or DocumentStore()
        order = store.get_by_id('orders', order_id)
        if order is None:
            return None
        if order.status != Order.STATUS_PENDING:
            raise ValidationError('订单已被处理', payload={'status': order.status})
        if order.assigned_to and order.assigned_to != staff.staff_id:
            raise ValidationError('订单已由其他员工认领')

        try:
            record = store.add('picking', {
                'order_id': order.id,
                'staff_id': staff.staff_id,
                'staff_name': staff.display_name,
                'items': list(order.items or []),
                'total': order.total or 0.0,
                'customer_info': {
                    'full_name': order.full_name,
                    'phone': order.phone,
                    'address': order.address,
                },
                'picked_at': datetime.utcnow(),
                'status': PickingRecord.STATUS_REQUESTED,
                'shipping_notes': (shipping_notes or '').strip(),
            })
            store.update('orders', order.id, {
                'status': Order.STATUS_PROCESSING,
                'assigned_to': staff.staff_id,
                'assigned_at': order.assigned_at or datetime.utcnow(),
            })
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 提交拣货失败 (订单 {order_id}): {e}')
            raise

        current_app.logger.info(f'员工 {staff.display_name} 提交订单 #{order.id} 拣货')
        return record

    @staticmethod
    def assign_order(order_id, staff: User, store: DocumentStore = None):
        """员工认领待处理订单"""
        store = store or DocumentStore()
        order = store.get_by_id('orders', order_id)
        if order is None:
            return None
        if order.status != Order.STATUS_PENDING or order.assigned_to:
            raise ValidationError('订单不可认领')

        try:
            store.update('orders', order.id, {
                'assigned_to': staff.staff_id,
                'assigned_at': datetime.utcnow(),
            })
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 认领订单失败 (订单 {order_id}): {e}')
            raise
        return order

    @staticmethod
    def pending_orders(store: DocumentStore = None):
        """未被认领的待处理订单"""
        store = store or DocumentStore()
        orders = store.query_docs('orders', 'status', '==', Order.STATUS_PENDING)
        return [o for o in orders if not o.assigned_to]

    @staticmethod
    def active_orders(store: DocumentStore = None):
        """管理员视图：未签收的订单"""
        store = store or DocumentStore()
        return [o for o in store.get_all('orders') if o.status != Order.STATUS_DELIVERED]

    @staticmethod
    def list_picking(store: DocumentStore = None):
        store = store or DocumentStore()
        return store.get_all('picking')

    @staticmethod
    def picking_history(staff: User, store: DocumentStore = None):
        """
        员工拣货历史
        已认领但未拣货的订单以「已认领」虚拟记录排在前面
        """
        store = store or DocumentStore()
        records = store.query_docs('picking', 'staff_id', '==', staff.staff_id)

        assigned = [
            o for o in store.query_docs('orders', 'assigned_to', '==', staff.staff_id)
            if o.status == Order.STATUS_PENDING
        ]
        virtual = [{
            'id': None,
            'order_id': o.id,
            'staff_id': staff.staff_id,
            'staff_name': staff.email or staff.display_name,
            'items': o.items or [],
            'total': o.total or 0.0,
            'customer_info': {
                'full_name': o.full_name,
                'phone': o.phone,
                'address': o.address,
            },
            'picked_at': o.assigned_at.isoformat() if o.assigned_at else None,
            'status': PickingRecord.STATUS_ASSIGNED,
            'tracking_number': '',
            'shipping_notes': '',
        } for o in assigned]

        return virtual + [r.to_dict() for r in records]
