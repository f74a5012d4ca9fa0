"""
文档存储门面
以集合名访问 SQLAlchemy 模型，提供 get_all / get_by_id / add / update / remove / query_docs。
写操作只 flush 不 commit，事务边界由调用方的服务决定。
"""
import operator
from app.extensions import db
from app.exceptions import NotFound
from app.models import User, Product, StockTransaction, Order, PickingRecord


class DocumentStore:
    """集合名 -> 模型 的统一存取接口"""

    COLLECTIONS = {
        'users': User,
        'products': Product,
        'stockTransactions': StockTransaction,
        'orders': Order,
        'picking': PickingRecord,
    }

    OPERATORS = {
        '==': operator.eq,
        '!=': operator.ne,
        '<': operator.lt,
        '<=': operator.le,
        '>': operator.gt,
        '>=': operator.ge,
    }

    def __init__(self, session=None):
        self.session = session or db.session

    def model_for(self, collection):
        try:
            return self.COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f'未知集合: {collection}')

    @staticmethod
    def _coerce_id(record_id):
        try:
            return int(record_id)
        except (TypeError, ValueError):
            return None

    def _column(self, model, field):
        if field not in model.__table__.columns:
            raise ValueError(f'{model.__tablename__} 不存在字段: {field}')
        return getattr(model, field)

    def get_all(self, collection):
        model = self.model_for(collection)
        return self.session.query(model).order_by(model.id.asc()).all()

    def get_by_id(self, collection, record_id, for_update=False):
        """
        按ID读取，不存在时返回 None
        for_update=True 时加行锁 (SELECT ... FOR UPDATE) 并以数据库中的最新值覆盖会话缓存
        """
        model = self.model_for(collection)
        pk = self._coerce_id(record_id)
        if pk is None:
            return None
        if for_update:
            return self.session.get(model, pk, with_for_update=True, populate_existing=True)
        return self.session.get(model, pk)

    def add(self, collection, fields):
        """新建记录并返回（已分配 id）"""
        model = self.model_for(collection)
        for field in fields:
            self._column(model, field)
        record = model(**fields)
        self.session.add(record)
        self.session.flush()
        return record

    def update(self, collection, record_id, fields):
        record = self.get_by_id(collection, record_id)
        if record is None:
            raise NotFound(f'{collection}/{record_id} 不存在')
        for field, value in fields.items():
            self._column(record.__class__, field)
            setattr(record, field, value)
        self.session.flush()
        return record

    def remove(self, collection, record_id):
        record = self.get_by_id(collection, record_id)
        if record is None:
            raise NotFound(f'{collection}/{record_id} 不存在')
        self.session.delete(record)
        self.session.flush()

    def query_docs(self, collection, field, op, value):
        """
        单字段条件查询
        用法: store.query_docs('picking', 'staff_id', '==', uid)
        """
        model = self.model_for(collection)
        column = self._column(model, field)
        if op == 'in':
            condition = column.in_(list(value))
        elif op in self.OPERATORS:
            condition = self.OPERATORS[op](column, value)
        else:
            raise ValueError(f'不支持的操作符: {op}')
        return self.session.query(model).filter(condition).order_by(model.id.asc()).all()
