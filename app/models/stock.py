from app.extensions import db
from .base import BaseModel


class StockTransaction(BaseModel):
    """
    库存审计流水 (核心表)
    每一次库存数量变动追加一条记录，只增不改
    """
    __tablename__ = 'stock_transactions'

    TYPE_IN = 'stock_in'    # 入库
    TYPE_OUT = 'stock_out'  # 出库
    TYPES = (TYPE_IN, TYPE_OUT)

    type = db.Column(db.String(20), nullable=False, index=True)

    product_id = db.Column(db.Integer, index=True)  # 产品可能已删除，不做外键约束
    product_name = db.Column(db.String(128))  # 变动时的名称快照

    quantity = db.Column(db.Integer, nullable=False)  # 变动数量 (+10, -5)
    remaining_stock = db.Column(db.Integer, nullable=False)  # 变动后结余 (快照)

    reason = db.Column(db.String(255))
    reference_id = db.Column(db.String(64), index=True)  # 产品ID 或 订单ID

    staff_id = db.Column(db.String(64))
    staff_name = db.Column(db.String(128))
