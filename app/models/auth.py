from flask_login import UserMixin
from app.extensions import db
from .base import BaseModel


class User(UserMixin, BaseModel):
    """用户 (顾客 / 员工 / 管理员)"""
    __tablename__ = 'auth_users'

    ROLE_CUSTOMER = 'customer'
    ROLE_STAFF = 'staff'
    ROLE_ADMIN = 'admin'
    ROLES = (ROLE_CUSTOMER, ROLE_STAFF, ROLE_ADMIN)

    POSITIONS = ('ผู้จัดการ', 'ผู้ดูแลระบบ', 'ผู้พัฒนาระบบ', 'ผู้อำนวยการ', 'อื่นๆ')

    uid = db.Column(db.String(64), unique=True, index=True)  # 外部认证系统的用户标识
    email = db.Column(db.String(128), unique=True, index=True)
    first_name = db.Column(db.String(64))
    last_name = db.Column(db.String(64))
    phone = db.Column(db.String(20))
    role = db.Column(db.String(20), default=ROLE_CUSTOMER, index=True)
    position = db.Column(db.String(64), default='')  # 职位 (管理员个人资料)

    @property
    def display_name(self):
        if self.first_name and self.last_name:
            return f'{self.first_name} {self.last_name}'
        return self.email or ''

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_staff(self):
        """员工权限（管理员同样拥有）"""
        return self.role in (self.ROLE_STAFF, self.ROLE_ADMIN)

    @property
    def staff_id(self):
        """写入流水时使用的员工标识"""
        return self.uid or str(self.id)

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'
