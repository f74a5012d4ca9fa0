from app.extensions import db
from .base import BaseModel


class Order(BaseModel):
    """销售订单（订单行以 JSON 快照保存）"""
    __tablename__ = 'trade_orders'

    STATUS_PENDING = 'รอดำเนินการ'       # 等待处理
    STATUS_PROCESSING = 'กำลังดำเนินการ'  # 已拣货
    STATUS_SHIPPING = 'กำลังจัดส่ง'       # 配送中
    STATUS_DELIVERED = 'จัดส่งสำเร็จ'     # 已签收

    uid = db.Column(db.String(64), index=True)  # 下单顾客
    items = db.Column(db.JSON, default=list)  # [{'id', 'name', 'price', 'quantity', 'image_url'}]
    total = db.Column(db.Float, default=0.0)

    # 收货信息
    full_name = db.Column(db.String(128))
    phone = db.Column(db.String(32))
    address = db.Column(db.String(512))

    status = db.Column(db.String(32), default=STATUS_PENDING, index=True)
    tracking_number = db.Column(db.String(64), default='')
    shipping_method = db.Column(db.String(64), default='')

    # 员工认领
    assigned_to = db.Column(db.String(64), index=True)
    assigned_at = db.Column(db.DateTime)
