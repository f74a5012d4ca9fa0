from sqlalchemy import func

from app.extensions import db
from app.models import Product, StockTransaction, User


def test_forge_keeps_ledger_in_step_with_stock(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['forge'])

    assert result.exit_code == 0, result.output
    with app.app_context():
        products = Product.query.all()
        assert len(products) == 15
        assert User.query.filter_by(role=User.ROLE_ADMIN).count() == 1

        for product in products:
            ledger_total = db.session.query(
                func.coalesce(func.sum(StockTransaction.quantity), 0)
            ).filter(StockTransaction.product_id == product.id).scalar()
            assert ledger_total == product.quantity

            latest = StockTransaction.query.filter_by(product_id=product.id) \
                .order_by(StockTransaction.id.desc()).first()
            if latest is not None:
                assert latest.remaining_stock == product.quantity
            assert product.quantity >= 0


def test_status_reports_counts(app):
    runner = app.test_cli_runner()

    empty = runner.invoke(args=['status'])
    assert 'Users' in empty.output
    assert 'flask forge' in empty.output

    runner.invoke(args=['forge'])
    result = runner.invoke(args=['status'])

    assert result.exit_code == 0
    assert '✔' in result.output


def test_stock_alerts_lists_low_stock(app):
    with app.app_context():
        db.session.add_all([
            Product(name='Green tea', price=10.0, quantity=0),
            Product(name='Coffee', price=10.0, quantity=50),
        ])
        db.session.commit()
    runner = app.test_cli_runner()

    result = runner.invoke(args=['stock-alerts'])
    assert result.exit_code == 0
    assert 'Green tea' in result.output
    assert 'Coffee' not in result.output
    assert '共 1 条预警' in result.output

    result = runner.invoke(args=['stock-alerts', '--search', 'coffee'])
    assert '没有库存预警' in result.output
