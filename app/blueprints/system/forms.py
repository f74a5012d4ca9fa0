from flask_wtf import FlaskForm
from wtforms import SelectField, StringField
from wtforms.validators import DataRequired, Length, Optional
from app.models.auth import User


class RoleForm(FlaskForm):
    """用户角色修改"""
    role = SelectField('บทบาท', choices=[(r, r) for r in User.ROLES], validators=[DataRequired()])


class ProfileForm(FlaskForm):
    """个人资料"""
    first_name = StringField('ชื่อ', validators=[Optional(), Length(max=64, message='名字过长')])
    last_name = StringField('นามสกุล', validators=[Optional(), Length(max=64, message='姓氏过长')])
    phone = StringField('เบอร์โทรศัพท์', validators=[Optional(), Length(max=20, message='电话号码过长')])
    position = StringField('ตำแหน่ง', validators=[Optional(), Length(max=64)])

    FIELDS = ('first_name', 'last_name', 'phone', 'position')
