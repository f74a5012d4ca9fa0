"""
表单数值宽松转换
"""
import math


def to_number(value, default=0.0):
    """
    宽松数值转换：无法解析的输入一律视为 default，不抛异常
    ('' / None / 'abc' / NaN -> 0)
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except ValueError:
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_int(value, default=0):
    """宽松整数转换，小数部分截断"""
    return int(to_number(value, default))
