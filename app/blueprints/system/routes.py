"""
系统管理模块 - 用户角色与个人资料
"""
from flask import jsonify
from flask_login import login_required, current_user

from . import bp
from .forms import RoleForm, ProfileForm
from app.models.auth import User
from app.services.user_service import UserService
from app.utils.forms import validate_form, submitted_data
from app.utils.permissions import admin_required


@bp.route('/users')
@login_required
@admin_required
def users():
    """用户列表"""
    return jsonify({
        'success': True,
        'users': [u.to_dict() for u in UserService.list_users()],
    })


@bp.route('/users/<int:user_id>/role', methods=['POST'])
@login_required
@admin_required
def change_role(user_id):
    """修改用户角色"""
    form = validate_form(RoleForm())
    user = UserService.change_role(user_id, form.role.data)
    return jsonify({'success': True, 'user': user.to_dict()})


@bp.route('/profile')
@login_required
@admin_required
def profile():
    """当前管理员的个人资料"""
    return jsonify({
        'success': True,
        'user': current_user.to_dict(),
        'positions': list(User.POSITIONS),
    })


@bp.route('/profile', methods=['POST'])
@login_required
@admin_required
def update_profile():
    """更新个人资料，未提交的字段保持原值"""
    form = validate_form(ProfileForm())
    user = UserService.update_profile(current_user, submitted_data(form, ProfileForm.FIELDS))
    return jsonify({'success': True, 'user': user.to_dict()})
