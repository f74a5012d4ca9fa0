from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import Length, Optional


class ShippingForm(FlaskForm):
    """物流信息表单，单号为空时只保存物流方式"""
    tracking_number = StringField('เลขพัสดุ', validators=[Optional(), Length(max=64)])
    shipping_method = StringField('วิธีจัดส่ง', validators=[Optional(), Length(max=64)])
