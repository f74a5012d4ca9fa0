from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed
from wtforms import StringField
from wtforms.validators import Optional

IMAGE_EXTENSIONS = ['png', 'jpg', 'jpeg', 'gif', 'webp']


class ProductForm(FlaskForm):
    """
    商品表单 (新建 / 编辑共用)
    价格、数量保持原始字符串，由服务层宽松转换，非数字按 0 处理
    """
    name = StringField('ชื่อสินค้า')
    description = StringField('รายละเอียด')
    price = StringField('ราคา')
    quantity = StringField('จำนวน')
    image_url = StringField('ลิงก์รูปภาพ')
    image = FileField('รูปภาพ', validators=[Optional(), FileAllowed(IMAGE_EXTENSIONS, '仅支持图片文件')])

    FIELDS = ('name', 'description', 'price', 'quantity', 'image_url')


class StockIncrementForm(FlaskForm):
    """补货表单"""
    quantity = StringField('จำนวนที่เพิ่ม', default='1')
