import click
import random
from flask.cli import with_appcontext
from app.extensions import db
from app.models.auth import User
from app.models.biz import Product
from app.models.stock import StockTransaction
from app.models.trade import Order
from app.models.picking import PickingRecord
from app.services.inventory_service import InventoryService
from app.services.picking_service import PickingService
from app.services.stock_alert_service import StockAlertService
from app.utils.fake_gen import fake


@click.command('status')
@with_appcontext
def status():
    """
    [验证指令] 查看当前数据库中的数据统计。
    """
    click.echo(click.style('📊 后台数据库状态:', fg='cyan', bold=True))

    try:
        u_count = User.query.count()
        p_count = Product.query.count()
        o_count = Order.query.count()
        k_count = PickingRecord.query.count()
        t_count = StockTransaction.query.count()

        click.echo(f" - 用户 (Users): \t{u_count}")
        click.echo(f" - 商品 (Products): \t{p_count}")
        click.echo(f" - 订单 (Orders): \t{o_count}")
        click.echo(f" - 拣货单 (Picking): \t{k_count}")
        click.echo(f" - 库存流水 (Ledger): \t{t_count}")

        if u_count > 0:
            click.echo(click.style('✔ 数据库连接正常，数据已存在。', fg='green'))
        else:
            click.echo(click.style('⚠ 数据库为空，请运行 flask forge 生成数据。', fg='yellow'))

    except Exception as e:
        click.echo(click.style(f'✘ 数据库读取失败: {str(e)}', fg='red'))
        click.echo("请检查是否执行了 'flask db upgrade'")


@click.command('stock-alerts')
@click.option('--search', default='', help='按商品名过滤')
@with_appcontext
def stock_alerts(search):
    """列出缺货 / 低库存商品"""
    alerts = StockAlertService.check_stock_alerts(search=search)
    if not alerts:
        click.echo(click.style('✔ 没有库存预警', fg='green'))
        return

    for alert in alerts:
        color = 'red' if alert['remaining_stock'] == 0 else 'yellow'
        click.echo(click.style(
            f"[{alert['type']}] #{alert['product_id']} {alert['product_name']} "
            f"(剩余 {alert['remaining_stock']})",
            fg=color
        ))
    click.echo(f'共 {len(alerts)} 条预警')


@click.command('forge')
@click.option('--scale', default=1, help='数据规模倍数 (默认1倍)')
@with_appcontext
def forge(scale):
    """
    初始化并填充演示数据。
    期初库存、发货扣减都通过库存服务写入，流水与库存保持一致。
    警告：这将清除数据库中的现有数据！
    """
    click.echo(click.style(f'⚡ 初始化演示数据 (规模: {scale}x)...', fg='cyan', bold=True))

    db.drop_all()
    db.create_all()

    click.echo('正在创建用户...')
    admin, staff_members = init_users(scale)

    click.echo('正在创建商品并记录期初库存...')
    products = init_products(admin, scale)

    click.echo('正在生成订单与拣货流程...')
    init_orders(admin, staff_members, products, scale)

    click.echo(click.style('✔ 演示数据构建完成！', fg='green', bold=True))
    click.echo("管理员账号: admin@shop.local")


def init_users(scale=1):
    """管理员、员工、顾客"""
    admin = User(uid='admin', email='admin@shop.local', first_name='ผู้ดูแล', last_name='ระบบ',
                 role=User.ROLE_ADMIN)
    db.session.add(admin)

    staff_members = []
    for i in range(3 * scale):
        staff = User(
            uid=f'staff-{i}',
            email=f'staff{i}@shop.local',
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            phone=fake.phone_number(),
            role=User.ROLE_STAFF,
        )
        db.session.add(staff)
        staff_members.append(staff)

    for i in range(20 * scale):
        db.session.add(User(
            uid=f'customer-{i}',
            email=f'customer{i}@shop.local',
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            phone=fake.phone_number(),
            role=User.ROLE_CUSTOMER,
        ))

    db.session.commit()
    click.echo(f'  ✓ 已创建 {1 + len(staff_members) + 20 * scale} 个用户')
    return admin, staff_members


def init_products(admin, scale=1):
    products = []
    for _ in range(15 * scale):
        product, _ = InventoryService.record_creation(
            name=fake.shop_product_name(),
            description=fake.sentence(),
            price=round(random.uniform(59, 2590), 2),
            quantity=random.choice([0, 1, 5, 20, 50, 120]),
            staff=admin,
        )
        products.append(product)
    click.echo(f'  ✓ 已创建 {len(products)} 个商品')
    return products


def init_orders(admin, staff_members, products, scale=1):
    """待处理订单；部分由员工拣货，部分已发货"""
    customers = User.query.filter_by(role=User.ROLE_CUSTOMER).all()
    order_count = 30 * scale
    shortages = 0

    for _ in range(order_count):
        customer = random.choice(customers)
        chosen = random.sample(products, k=min(random.randint(1, 3), len(products)))
        items = [{
            'id': p.id,
            'name': p.name,
            'price': p.price,
            'quantity': random.randint(1, 3),
            'image_url': p.image_url,
        } for p in chosen]

        order = Order(
            uid=customer.uid,
            items=items,
            total=round(sum(i['price'] * i['quantity'] for i in items), 2),
            full_name=customer.display_name,
            phone=customer.phone,
            address=fake.address(),
        )
        db.session.add(order)
        db.session.commit()

        stage = random.choice(['pending', 'picked', 'shipped', 'shipped'])
        if stage == 'pending' or not staff_members:
            continue

        record = PickingService.create_picking(order.id, random.choice(staff_members))
        if stage == 'shipped':
            result = PickingService.commit_shipment(
                record.id, fake.tracking_number(), fake.shipping_method(), staff=admin
            )
            shortages += len(result.shortages)

    click.echo(f'  ✓ 已创建 {order_count} 个订单 (缺货跳过 {shortages} 行)')
