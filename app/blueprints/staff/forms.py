from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import Length, Optional


class PickForm(FlaskForm):
    """员工拣货提交"""
    shipping_notes = StringField('หมายเหตุการจัดส่ง', validators=[Optional(), Length(max=500)])
