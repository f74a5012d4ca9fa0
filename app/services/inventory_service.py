from datetime import datetime
from flask import current_app
from app.extensions import db
from app.models.auth import User
from app.models.stock import StockTransaction
from app.services.document_store import DocumentStore
from app.exceptions import ValidationError
from app.utils.cloud_storage import upload_image, generate_image_path
from app.utils.validators import to_number, to_int


def staff_fields(staff: User = None):
    """流水中的操作人 (staff_id, staff_name)，管理员操作统一记为默认名称"""
    default_name = current_app.config.get('DEFAULT_STAFF_NAME', 'แอดมิน')
    if staff is None:
        return '', default_name
    if staff.is_admin:
        return staff.staff_id, default_name
    return staff.staff_id, staff.display_name or default_name


def append_transaction(store: DocumentStore, move_type: str, product_id, product_name: str,
                       quantity: int, remaining_stock: int, reason: str, reference_id,
                       staff: User = None) -> StockTransaction:
    """
    追加一条库存流水（只 flush，由调用方提交）
    :param quantity: 带符号的变动数量，入库为正、出库为负
    """
    staff_id, staff_name = staff_fields(staff)
    return store.add('stockTransactions', {
        'type': move_type,
        'product_id': product_id,
        'product_name': product_name,
        'quantity': quantity,
        'remaining_stock': remaining_stock,
        'reason': reason,
        'reference_id': str(reference_id),
        'staff_id': staff_id,
        'staff_name': staff_name,
    })


def _upload_product_image(image_file):
    """先上传图片拿到 URL，失败时抛出 StorageError，商品不会被写入"""
    path = generate_image_path(image_file.filename)
    return upload_image(image_file, path)


class InventoryService:
    @staticmethod
    def record_creation(name, description='', price=0, quantity=0, image_url='',
                        image_file=None, staff: User = None, store: DocumentStore = None):
        """
        新建商品，期初库存大于 0 时记录一条入库流水
        :return: (product, transaction)；名称为空时返回 None 且不写入任何数据
        """
        store = store or DocumentStore()
        name = (name or '').strip()
        if not name:
            return None

        price = max(to_number(price), 0.0)
        quantity = max(to_int(quantity), 0)
        image_url = (image_url or '').strip()

        if image_file is not None:
            image_url = _upload_product_image(image_file)

        try:
            product = store.add('products', {
                'name': name,
                'description': (description or '').strip(),
                'price': price,
                'quantity': quantity,
                'image_url': image_url,
            })

            transaction = None
            if quantity > 0:
                transaction = append_transaction(
                    store, StockTransaction.TYPE_IN, product.id, product.name,
                    quantity=quantity,
                    remaining_stock=quantity,
                    reason=f'เพิ่มสินค้าใหม่ {product.name}',
                    reference_id=product.id,
                    staff=staff,
                )

            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 新建商品失败: {e}')
            raise

        current_app.logger.info(f'新建商品 #{product.id} {product.name}，期初库存 {quantity}')
        return product, transaction

    @staticmethod
    def increment_stock(product_id, amount, staff: User = None, store: DocumentStore = None):
        """
        补货入库
        :return: (product, transaction)；数量 <= 0 或商品不存在时返回 None
        """
        store = store or DocumentStore()
        amount = to_int(amount)
        if amount <= 0:
            return None

        product = store.get_by_id('products', product_id)
        if product is None:
            return None

        new_quantity = (product.quantity or 0) + amount

        try:
            store.update('products', product.id, {'quantity': new_quantity})
            transaction = append_transaction(
                store, StockTransaction.TYPE_IN, product.id, product.name,
                quantity=amount,
                remaining_stock=new_quantity,
                reason=f'เพิ่มสต็อก {product.name} ({amount} ชิ้น)',
                reference_id=product.id,
                staff=staff,
            )
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 补货失败 (商品 {product_id}): {e}')
            raise

        current_app.logger.info(f'补货 {product.name}: +{amount} -> {new_quantity}')
        return product, transaction

    @staticmethod
    def edit_product(product_id, fields: dict, image_file=None, staff: User = None,
                     store: DocumentStore = None):
        """
        编辑商品，库存数量有差额时记录一条调整流水（差额为 0 不记录）
        :param fields: name / description / price / quantity / image_url，缺省字段保持原值
        :return: (product, transaction)；商品不存在时返回 None
        """
        store = store or DocumentStore()
        product = store.get_by_id('products', product_id)
        if product is None:
            return None

        old_name = product.name
        old_quantity = product.quantity or 0

        name = (fields.get('name', product.name) or '').strip()
        if not name:
            raise ValidationError('商品名称不能为空')
        quantity = to_int(fields['quantity']) if 'quantity' in fields else old_quantity
        if quantity < 0:
            raise ValidationError('库存数量不能为负', payload={'quantity': quantity})
        price = to_number(fields['price']) if 'price' in fields else product.price
        if price < 0:
            raise ValidationError('价格不能为负', payload={'price': price})

        image_url = (fields.get('image_url', product.image_url) or '').strip()
        if image_file is not None:
            image_url = _upload_product_image(image_file)

        quantity_diff = quantity - old_quantity

        try:
            store.update('products', product.id, {
                'name': name,
                'description': (fields.get('description', product.description) or '').strip(),
                'price': price,
                'quantity': quantity,
                'image_url': image_url,
            })

            transaction = None
            if quantity_diff != 0:
                transaction = append_transaction(
                    store,
                    StockTransaction.TYPE_IN if quantity_diff > 0 else StockTransaction.TYPE_OUT,
                    product.id, old_name,
                    quantity=quantity_diff,
                    remaining_stock=quantity,
                    reason=f'ปรับจำนวนสต็อก {old_name} ({old_quantity} → {quantity})',
                    reference_id=product.id,
                    staff=staff,
                )
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 编辑商品失败 (商品 {product_id}): {e}')
            raise

        return product, transaction

    @staticmethod
    def delete_product(product_id, staff: User = None, store: DocumentStore = None):
        """
        删除商品；开启 LEDGER_RECORD_DELETIONS 时把剩余库存记为一条出库流水
        :return: (deleted, transaction)
        """
        store = store or DocumentStore()
        product = store.get_by_id('products', product_id)
        if product is None:
            return False, None

        remaining = product.quantity or 0
        name = product.name

        try:
            transaction = None
            if current_app.config.get('LEDGER_RECORD_DELETIONS', True) and remaining > 0:
                transaction = append_transaction(
                    store, StockTransaction.TYPE_OUT, product.id, name,
                    quantity=-remaining,
                    remaining_stock=0,
                    reason=f'ลบสินค้า {name}',
                    reference_id=product.id,
                    staff=staff,
                )
            store.remove('products', product.id)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 删除商品失败 (商品 {product_id}): {e}')
            raise

        current_app.logger.info(f'删除商品 {name}，剩余库存 {remaining}')
        return True, transaction

    @staticmethod
    def list_products():
        return DocumentStore().get_all('products')

    @staticmethod
    def list_transactions(search=None, move_type=None, start=None, end=None):
        """
        库存流水查询（最新在前）
        :return: {'items': [...], 'total_in': int, 'total_out': int}
        """
        query = StockTransaction.query

        if search:
            query = query.filter(StockTransaction.product_name.ilike(f'%{search.strip()}%'))
        if move_type and move_type != 'all':
            query = query.filter(StockTransaction.type == move_type)
        if isinstance(start, datetime):
            query = query.filter(StockTransaction.created_at >= start)
        if isinstance(end, datetime):
            query = query.filter(StockTransaction.created_at <= end)

        items = query.order_by(StockTransaction.created_at.desc(), StockTransaction.id.desc()).all()

        total_in = sum(abs(t.quantity) for t in items if t.type == StockTransaction.TYPE_IN)
        total_out = sum(abs(t.quantity) for t in items if t.type == StockTransaction.TYPE_OUT)

        return {
            'items': items,
            'total_in': total_in,
            'total_out': total_out,
        }
