from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

# 初始化扩展对象 (暂不绑定 app)
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()

# 后台只提供 JSON 接口，未登录直接返回 401，不设置 login_view
login_manager.session_protection = 'strong'


@login_manager.user_loader
def load_user(user_id):
    """按 session 中的用户 ID 加载后台用户"""
    from app.models import User
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
