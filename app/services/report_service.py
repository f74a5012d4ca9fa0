"""报表服务 - 管理后台总览统计"""
from datetime import datetime
from sqlalchemy import func
from app.extensions import db
from app.models.auth import User
from app.models.biz import Product
from app.models.trade import Order
from app.models.picking import PickingRecord
from app.services.stock_alert_service import StockAlertService


class ReportService:
    """报表服务"""

    @staticmethod
    def get_overview_stats(now=None):
        """
        总览统计
        今日订单 / 今日营收以当天 00:00 (UTC) 为界
        """
        now = now or datetime.utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        total_users = User.query.count()
        total_orders = Order.query.count()
        total_products = Product.query.count()

        today_orders = Order.query.filter(Order.created_at >= today).count()
        daily_revenue = db.session.query(
            func.coalesce(func.sum(Order.total), 0.0)
        ).filter(Order.created_at >= today).scalar()

        pending_orders = Order.query.filter(
            Order.status.in_([Order.STATUS_PENDING, Order.STATUS_PROCESSING])
        ).count()

        # 员工已申请出库、等待管理员发货的拣货单
        pending_shipments = PickingRecord.query.filter_by(
            status=PickingRecord.STATUS_REQUESTED
        ).count()

        conversion_rate = round(total_orders / total_users * 100, 1) if total_users else 0.0

        recent_orders = Order.query.order_by(
            Order.created_at.desc(), Order.id.desc()
        ).limit(5).all()

        return {
            'total_users': total_users,
            'today_orders': today_orders,
            'total_orders': total_orders,
            'total_products': total_products,
            'pending_shipments': pending_shipments,
            'daily_revenue': float(daily_revenue or 0.0),
            'stock_alerts': StockAlertService.get_alert_statistics()['total'],
            'pending_orders': pending_orders,
            'conversion_rate': conversion_rate,
            'recent_orders': [o.to_dict() for o in recent_orders],
        }
