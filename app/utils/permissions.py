"""
权限控制工具
提供装饰器和辅助函数用于检查用户角色
"""
from functools import wraps
from flask_login import current_user
from app.exceptions import PermissionDenied


def admin_required(f):
    """
    管理员权限装饰器
    需放在 login_required 之后
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_admin():
            raise PermissionDenied('需要管理员权限')
        return f(*args, **kwargs)
    return decorated_function


def staff_required(f):
    """员工权限装饰器（管理员同样可访问）"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_staff:
            raise PermissionDenied('需要员工权限')
        return f(*args, **kwargs)
    return decorated_function


def is_admin():
    """检查当前用户是否是管理员"""
    if not current_user.is_authenticated:
        return False
    return current_user.is_admin
