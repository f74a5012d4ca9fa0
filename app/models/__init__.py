# 按照依赖顺序导入
from .base import BaseModel
from .auth import User
from .biz import Product
from .stock import StockTransaction
from .trade import Order
from .picking import PickingRecord
