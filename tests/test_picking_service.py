import logging
from datetime import datetime

import pytest
from sqlalchemy import update

from app.extensions import db
from app.exceptions import ValidationError
from app.models import Order, PickingRecord, Product, StockTransaction
from app.services.picking_service import PickingService, ItemOutcome
from tests.factories import make_product, make_order_with_picking, make_user


def out_entries():
    return StockTransaction.query.filter_by(type=StockTransaction.TYPE_OUT) \
        .order_by(StockTransaction.id.asc()).all()


class TestCommitShipment:
    def test_shipment_decrements_each_line(self, admin):
        a = make_product('A', 10)
        b = make_product('B', 2)
        order, record = make_order_with_picking([(a, 3), (b, 1)])

        result = PickingService.commit_shipment(record.id, 'TH123', 'Kerry', staff=admin)

        assert result.dispatched
        assert result.fully_applied
        assert a.quantity == 7
        assert b.quantity == 1

        entries = out_entries()
        assert [(t.product_name, t.quantity, t.remaining_stock) for t in entries] == [
            ('A', -3, 7),
            ('B', -1, 1),
        ]
        assert all(t.reason == f'จัดส่งออเดอร์ {order.id}' for t in entries)
        assert all(t.reference_id == str(order.id) for t in entries)

        assert record.status == PickingRecord.STATUS_DISPATCHED
        assert record.tracking_number == 'TH123'
        assert order.status == Order.STATUS_SHIPPING
        assert order.tracking_number == 'TH123'
        assert order.shipping_method == 'Kerry'

    def test_insufficient_stock_is_skipped_and_reported(self, admin, caplog):
        a = make_product('A', 1)
        order, record = make_order_with_picking([(a, 5)])

        with caplog.at_level(logging.WARNING):
            result = PickingService.commit_shipment(record.id, 'TH999', staff=admin)

        assert a.quantity == 1
        assert out_entries() == []
        assert len(result.shortages) == 1
        shortage = result.shortages[0]
        assert shortage.status == ItemOutcome.INSUFFICIENT_STOCK
        assert shortage.requested == 5
        assert shortage.available == 1
        assert 'สต็อกไม่พอสำหรับ A' in caplog.text

        # 其余字段照常更新
        assert record.status == PickingRecord.STATUS_DISPATCHED
        assert order.status == Order.STATUS_SHIPPING

    def test_partial_shortage_applies_other_lines(self, ctx):
        a = make_product('A', 1)
        b = make_product('B', 4)
        _, record = make_order_with_picking([(a, 2), (b, 4)])

        result = PickingService.commit_shipment(record.id, 'TH1')

        assert [o.status for o in result.items] == [
            ItemOutcome.INSUFFICIENT_STOCK,
            ItemOutcome.APPLIED,
        ]
        assert a.quantity == 1
        assert b.quantity == 0
        assert not result.fully_applied

    def test_missing_product_is_skipped(self, ctx):
        a = make_product('A', 3)
        _, record = make_order_with_picking([(a, 1)])
        db.session.delete(a)
        db.session.commit()

        result = PickingService.commit_shipment(record.id, 'TH1')

        assert result.items[0].status == ItemOutcome.PRODUCT_NOT_FOUND
        assert out_entries() == []

    def test_invalid_quantity_is_skipped(self, ctx):
        a = make_product('A', 3)
        _, record = make_order_with_picking([(a, 0)])

        result = PickingService.commit_shipment(record.id, 'TH1')

        assert result.items[0].status == ItemOutcome.INVALID_QUANTITY
        assert a.quantity == 3
        assert out_entries() == []

    def test_stock_is_decremented_only_once(self, ctx):
        a = make_product('A', 10)
        _, record = make_order_with_picking([(a, 4)])

        PickingService.commit_shipment(record.id, 'TH1')
        second = PickingService.commit_shipment(record.id, 'TH2', 'Flash')

        assert second.already_committed
        assert second.items == []
        assert a.quantity == 6
        assert len(out_entries()) == 1
        assert record.tracking_number == 'TH2'
        assert record.shipping_method == 'Flash'

    def test_empty_tracking_number_only_saves_shipping_fields(self, ctx):
        a = make_product('A', 10)
        order, record = make_order_with_picking([(a, 4)])

        result = PickingService.commit_shipment(record.id, '   ', 'Kerry')

        assert not result.dispatched
        assert result.status == PickingRecord.STATUS_PENDING
        assert record.status == PickingRecord.STATUS_PENDING
        assert record.shipping_method == 'Kerry'
        assert order.status == Order.STATUS_PROCESSING
        assert a.quantity == 10
        assert not record.stock_committed
        assert out_entries() == []

    def test_unknown_picking_record(self, ctx):
        assert PickingService.commit_shipment(404, 'TH1') is None

    def test_blank_tracking_number_after_dispatch_is_rejected(self, ctx):
        a = make_product('A', 10)
        order, record = make_order_with_picking([(a, 4)])
        PickingService.commit_shipment(record.id, 'TH1')

        with pytest.raises(ValidationError):
            PickingService.commit_shipment(record.id, '', 'Kerry')

        assert record.status == PickingRecord.STATUS_DISPATCHED
        assert record.tracking_number == 'TH1'
        assert order.status == Order.STATUS_SHIPPING
        assert order.tracking_number == 'TH1'
        assert a.quantity == 6

    def test_delivered_record_cannot_be_shipped_again(self, ctx):
        a = make_product('A', 10)
        order, record = make_order_with_picking([(a, 4)])
        PickingService.commit_shipment(record.id, 'TH1')
        PickingService.commit_delivery(record.id)

        with pytest.raises(ValidationError):
            PickingService.commit_shipment(record.id, 'TH2')

        assert record.status == PickingRecord.STATUS_DELIVERED
        assert order.status == Order.STATUS_DELIVERED
        assert record.tracking_number == 'TH1'
        assert PickingService.active_orders() == []

    def test_commit_reads_latest_stock_committed_state(self, ctx):
        a = make_product('A', 10)
        _, record = make_order_with_picking([(a, 4)])
        assert not record.stock_committed

        # 直接改写数据库行，会话中缓存的仍是未扣减状态
        db.session.execute(
            update(PickingRecord)
            .where(PickingRecord.id == record.id)
            .values(stock_committed_at=datetime(2024, 1, 1))
            .execution_options(synchronize_session=False)
        )

        result = PickingService.commit_shipment(record.id, 'TH1')

        assert result.already_committed
        assert a.quantity == 10
        assert out_entries() == []

    def test_failure_rolls_back_everything(self, ctx, monkeypatch):
        a = make_product('A', 10)
        order, record = make_order_with_picking([(a, 4)])
        record_id, product_id, order_id = record.id, a.id, order.id

        def broken_commit():
            raise RuntimeError('db down')

        monkeypatch.setattr(db.session, 'commit', broken_commit)
        with pytest.raises(RuntimeError):
            PickingService.commit_shipment(record_id, 'TH1')
        monkeypatch.undo()

        assert db.session.get(Product, product_id).quantity == 10
        assert db.session.get(PickingRecord, record_id).status == PickingRecord.STATUS_REQUESTED
        assert not db.session.get(PickingRecord, record_id).stock_committed
        assert db.session.get(Order, order_id).status == Order.STATUS_PROCESSING
        assert out_entries() == []


class TestCommitDelivery:
    def test_delivery_marks_order_and_record(self, ctx):
        a = make_product('A', 10)
        order, record = make_order_with_picking([(a, 1)])
        PickingService.commit_shipment(record.id, 'TH1')

        PickingService.commit_delivery(record.id)

        assert order.status == Order.STATUS_DELIVERED
        assert record.status == PickingRecord.STATUS_DELIVERED
        assert a.quantity == 9

    def test_unknown_record(self, ctx):
        assert PickingService.commit_delivery(404) is None

    @pytest.mark.parametrize('status', [
        PickingRecord.STATUS_REQUESTED,
        PickingRecord.STATUS_PENDING,
    ])
    def test_undispatched_record_cannot_be_delivered(self, ctx, status):
        a = make_product('A', 5)
        order, record = make_order_with_picking([(a, 2)], status=status)

        with pytest.raises(ValidationError):
            PickingService.commit_delivery(record.id)

        assert record.status == status
        assert order.status == Order.STATUS_PROCESSING
        assert a.quantity == 5
        assert StockTransaction.query.count() == 0


def make_pending_order(uid='customer-1', assigned_to=None):
    order = Order(uid=uid, items=[{'id': 1, 'name': 'A', 'price': 10.0, 'quantity': 1}],
                  total=10.0, full_name='Malee', phone='08', address='Bangkok',
                  assigned_to=assigned_to)
    db.session.add(order)
    db.session.commit()
    return order


class TestStaffWorkflow:
    def test_create_picking_requests_dispatch(self, staff):
        order = make_pending_order()

        record = PickingService.create_picking(order.id, staff, shipping_notes=' fragile ')

        assert record.status == PickingRecord.STATUS_REQUESTED
        assert record.staff_id == staff.staff_id
        assert record.items == order.items
        assert record.customer_info['full_name'] == 'Malee'
        assert record.shipping_notes == 'fragile'
        assert order.status == Order.STATUS_PROCESSING
        assert order.assigned_to == staff.staff_id
        # 拣货不扣库存
        assert StockTransaction.query.count() == 0

    def test_cannot_pick_a_processed_order(self, staff):
        order = make_pending_order()
        PickingService.create_picking(order.id, staff)

        with pytest.raises(ValidationError):
            PickingService.create_picking(order.id, staff)

    def test_cannot_pick_order_assigned_to_someone_else(self, staff):
        order = make_pending_order(assigned_to='other-staff')

        with pytest.raises(ValidationError):
            PickingService.create_picking(order.id, staff)

    def test_assign_and_pending_orders(self, staff):
        first = make_pending_order()
        second = make_pending_order()

        PickingService.assign_order(first.id, staff)

        assert [o.id for o in PickingService.pending_orders()] == [second.id]
        with pytest.raises(ValidationError):
            PickingService.assign_order(first.id, staff)

    def test_history_lists_assigned_orders_first(self, staff):
        picked = make_pending_order()
        record = PickingService.create_picking(picked.id, staff)
        claimed = make_pending_order()
        PickingService.assign_order(claimed.id, staff)

        history = PickingService.picking_history(staff)

        assert [h['status'] for h in history] == [
            PickingRecord.STATUS_ASSIGNED,
            PickingRecord.STATUS_REQUESTED,
        ]
        assert history[0]['id'] is None
        assert history[0]['order_id'] == claimed.id
        assert history[1]['id'] == record.id

    def test_history_only_contains_own_records(self, staff):
        other = make_user('staff-2', role='staff')
        order = make_pending_order()
        PickingService.create_picking(order.id, other)

        assert PickingService.picking_history(staff) == []

    def test_active_orders_exclude_delivered(self, ctx):
        a = make_product('A', 5)
        delivered, record = make_order_with_picking([(a, 1)])
        PickingService.commit_shipment(record.id, 'TH1')
        PickingService.commit_delivery(record.id)
        open_order = make_pending_order()

        assert [o.id for o in PickingService.active_orders()] == [open_order.id]


class TestDispatchScenarios:
    def test_two_line_dispatch(self, ctx):
        a = make_product('ProductA', 5)
        b = make_product('ProductB', 1)
        order, record = make_order_with_picking([(a, 2), (b, 1)])

        PickingService.commit_shipment(record.id, 'TH123')

        assert (a.quantity, b.quantity) == (3, 0)
        by_name = {t.product_name: t for t in out_entries()}
        assert (by_name['ProductA'].quantity, by_name['ProductA'].remaining_stock) == (-2, 3)
        assert (by_name['ProductB'].quantity, by_name['ProductB'].remaining_stock) == (-1, 0)
        assert record.status == PickingRecord.STATUS_DISPATCHED
        assert order.status == Order.STATUS_SHIPPING

    def test_out_of_stock_line_does_not_block_the_rest(self, ctx):
        a = make_product('ProductA', 5)
        b = make_product('ProductB', 0)
        _, record = make_order_with_picking([(a, 2), (b, 1)])

        result = PickingService.commit_shipment(record.id, 'TH123')

        assert b.quantity == 0
        assert a.quantity == 3
        assert [t.product_name for t in out_entries()] == ['ProductA']
        assert [o.product_name for o in result.shortages] == ['ProductB']
