"""库存预警服务"""
import math
from datetime import datetime
from flask import current_app
from app.services.document_store import DocumentStore

ALERT_OUT_OF_STOCK = 'สต็อกหมด'  # 缺货
ALERT_LOW_STOCK = 'สต็อกต่ำ'     # 低库存


def compute_stock_alerts(products, ratio=0.2, now=None):
    """
    按当前库存计算预警
    阈值 = ceil(当前库存 * ratio)，以实时库存为基数，库存越少阈值越低
    库存为 0 -> 缺货；库存 <= 阈值 -> 低库存；输出顺序与输入一致
    """
    now = now or datetime.utcnow()
    alerts = []

    for product in products:
        current_stock = product.quantity or 0
        threshold = math.ceil(current_stock * ratio)

        if current_stock == 0:
            alert_type = ALERT_OUT_OF_STOCK
        elif current_stock <= threshold:
            alert_type = ALERT_LOW_STOCK
        else:
            continue

        alerts.append({
            'id': product.id,
            'type': alert_type,
            'product_id': product.id,
            'product_name': product.name,
            'remaining_stock': current_stock,
            'threshold': threshold,
            'notification_date': now.isoformat(),
        })

    return alerts


class StockAlertService:
    """库存预警服务"""

    @staticmethod
    def check_stock_alerts(search=None, store: DocumentStore = None):
        """读取全部商品并计算预警，可按商品名过滤"""
        store = store or DocumentStore()
        ratio = current_app.config.get('LOW_STOCK_RATIO', 0.2)
        alerts = compute_stock_alerts(store.get_all('products'), ratio=ratio)

        if search:
            keyword = search.strip().lower()
            alerts = [a for a in alerts if keyword in (a['product_name'] or '').lower()]
        return alerts

    @staticmethod
    def get_alert_statistics(store: DocumentStore = None):
        """获取预警统计"""
        alerts = StockAlertService.check_stock_alerts(store=store)
        out_of_stock = sum(1 for a in alerts if a['type'] == ALERT_OUT_OF_STOCK)
        return {
            'total': len(alerts),
            'out_of_stock': out_of_stock,
            'low_stock': len(alerts) - out_of_stock,
        }
