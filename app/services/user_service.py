from flask import current_app
from app.extensions import db
from app.models.auth import User
from app.services.document_store import DocumentStore
from app.exceptions import BackOfficeError, NotFound, ValidationError


class UserService:
    @staticmethod
    def list_users(store: DocumentStore = None):
        store = store or DocumentStore()
        return store.get_all('users')

    @staticmethod
    def change_role(user_id, new_role, store: DocumentStore = None) -> User:
        """
        修改用户角色 (customer / staff / admin)
        写入失败时回滚会话，用户对象恢复为原角色
        """
        store = store or DocumentStore()
        if new_role not in User.ROLES:
            raise ValidationError(f'无效角色: {new_role}', payload={'roles': list(User.ROLES)})

        user = store.get_by_id('users', user_id)
        if user is None:
            raise NotFound('用户不存在')

        previous_role = user.role
        try:
            store.update('users', user.id, {'role': new_role})
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 修改角色失败 ({user.email}): {e}')
            raise BackOfficeError('修改角色失败', payload={'role': previous_role})

        current_app.logger.info(f'用户 {user.email} 角色: {previous_role} -> {new_role}')
        return user

    PROFILE_FIELDS = ('first_name', 'last_name', 'phone', 'position')

    @staticmethod
    def update_profile(user: User, fields: dict, store: DocumentStore = None) -> User:
        """
        更新当前用户的个人资料 (姓名 / 电话 / 职位)
        未提交的字段保持原值
        """
        store = store or DocumentStore()
        changes = {
            name: str(fields[name] or '').strip()
            for name in UserService.PROFILE_FIELDS
            if name in fields
        }
        position = changes.get('position')
        if position and position not in User.POSITIONS:
            raise ValidationError(f'无效职位: {position}', payload={'positions': list(User.POSITIONS)})

        try:
            record = store.update('users', user.id, changes)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f'❌ 更新个人资料失败 ({user.email}): {e}')
            raise

        current_app.logger.info(f'用户 {user.email} 更新了个人资料')
        return record
