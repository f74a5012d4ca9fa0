from datetime import datetime
from app.extensions import db
from .base import BaseModel


class PickingRecord(BaseModel):
    """
    拣货记录
    员工提交拣货时创建，管理员填写物流单号后扣减库存
    """
    __tablename__ = 'trade_picking'

    STATUS_REQUESTED = 'แจ้งเบิก'     # 已申请出库
    STATUS_PENDING = 'รอดำเนินการ'    # 已保存物流信息但无单号
    STATUS_DISPATCHED = 'จัดส่งแล้ว'  # 已发货
    STATUS_DELIVERED = 'จัดส่งสำเร็จ'  # 已签收
    STATUS_ASSIGNED = 'มอบหมายแล้ว'   # 已认领未拣货 (仅用于员工视图，不落库)

    order_id = db.Column(db.Integer, db.ForeignKey('trade_orders.id'), index=True)
    staff_id = db.Column(db.String(64), index=True)
    staff_name = db.Column(db.String(128))

    items = db.Column(db.JSON, default=list)
    total = db.Column(db.Float, default=0.0)
    customer_info = db.Column(db.JSON, default=dict)  # {'full_name', 'phone', 'address'}

    picked_at = db.Column(db.DateTime, default=datetime.utcnow)
    status = db.Column(db.String(32), default=STATUS_REQUESTED, index=True)

    tracking_number = db.Column(db.String(64), default='')
    shipping_method = db.Column(db.String(64), default='')
    shipping_notes = db.Column(db.Text, default='')

    # 库存扣减时间，非空表示该记录已扣减过库存
    stock_committed_at = db.Column(db.DateTime)

    order = db.relationship('Order', backref=db.backref('picking_records', lazy='dynamic'))

    @property
    def stock_committed(self):
        return self.stock_committed_at is not None
