from app.exceptions import ValidationError


def validate_form(form):
    """校验表单，失败时抛出带字段错误的 ValidationError"""
    if not form.validate():
        raise ValidationError('表单校验失败', payload={'errors': form.errors})
    return form


def submitted_data(form, names):
    """只取请求中实际提交过的字段，未提交的字段不出现在结果里"""
    return {
        name: form[name].data
        for name in names
        if form[name].raw_data
    }
