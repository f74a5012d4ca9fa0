import logging
import os
import colorlog
from flask import Flask, jsonify
from config import config
from app.extensions import db, migrate, login_manager, csrf
from app.exceptions import BackOfficeError
from app.utils.cloud_storage import init_cloud_storage

# 导入 commands 模块，用于注册 CLI 命令
from app import commands


def create_app(config_name='default'):
    """后台应用工厂函数"""
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # 2. 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    # 3. 配置日志
    configure_logging(app)

    # 4. 对象存储
    init_cloud_storage(app)

    # 5. 注册蓝图 (Blueprints)
    register_blueprints(app)

    # 6. 注册全局错误处理
    register_error_handlers(app)

    # 7. 注册 CLI 命令
    register_commands(app)

    # 8. 生产环境自动建表
    auto_init_database(app)

    return app


def auto_init_database(app):
    """生产环境首次启动时自动创建数据表"""
    if app.testing:
        return
    if os.environ.get('FLASK_ENV') != 'production' and not os.environ.get('DATABASE_URL'):
        return

    with app.app_context():
        try:
            from sqlalchemy import inspect
            tables = inspect(db.engine).get_table_names()
            if 'stock_transactions' not in tables:
                app.logger.info('🚀 首次启动，正在创建数据库表...')
                db.create_all()
                app.logger.info('✅ 数据库初始化完成')
        except Exception as e:
            app.logger.exception(f'❌ 数据库初始化错误: {e}')


def register_blueprints(app):
    """注册所有业务模块蓝图"""
    # 总览
    from app.blueprints.main import main_bp
    app.register_blueprint(main_bp)

    # 商品与库存流水
    from app.blueprints.inventory import inventory_bp
    app.register_blueprint(inventory_bp, url_prefix='/inventory')

    # 拣货与发货
    from app.blueprints.picking import picking_bp
    app.register_blueprint(picking_bp, url_prefix='/picking')

    # 员工工作台
    from app.blueprints.staff import staff_bp
    app.register_blueprint(staff_bp, url_prefix='/staff')

    # 用户角色管理
    from app.blueprints.system import bp as system_bp
    app.register_blueprint(system_bp, url_prefix='/system')


def register_error_handlers(app):
    @app.errorhandler(BackOfficeError)
    def handle_backoffice_error(e):
        return jsonify(e.to_dict()), e.code

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify({'success': False, 'code': 401, 'message': '请先登录'}), 401

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({'success': False, 'code': 403, 'message': 'Access denied'}), 403

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({'success': False, 'code': 404, 'message': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_server_error(e):
        return jsonify({'success': False, 'code': 500, 'message': 'Internal server error'}), 500


def register_commands(app):
    """注册 Flask CLI 命令"""
    app.cli.add_command(commands.forge)
    app.cli.add_command(commands.status)
    app.cli.add_command(commands.stock_alerts)


def configure_logging(app):
    """配置彩色控制台日志"""
    if app.debug:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)

        formatter = colorlog.ColoredFormatter(
            "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s %(blue)s%(message)s",
            datefmt="%H:%M:%S",
            reset=True,
            log_colors={
                'DEBUG':    'cyan',
                'INFO':     'green',
                'WARNING':  'yellow',
                'ERROR':    'red',
                'CRITICAL': 'red,bg_white',
            },
            secondary_log_colors={},
            style='%'
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        app.logger.setLevel(logging.INFO)
