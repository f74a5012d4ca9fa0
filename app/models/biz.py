from app.extensions import db
from .base import BaseModel


class Product(BaseModel):
    """产品主表"""
    __tablename__ = 'biz_products'

    name = db.Column(db.String(128), nullable=False, index=True)
    description = db.Column(db.Text, default='')
    price = db.Column(db.Float, default=0.0)
    quantity = db.Column(db.Integer, default=0, nullable=False)  # 当前库存
    image_url = db.Column(db.String(512), default='')

    __table_args__ = (
        db.CheckConstraint('quantity >= 0', name='ck_product_quantity_non_negative'),
    )
