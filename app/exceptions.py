class BackOfficeError(Exception):
    """后台系统基础异常类"""
    def __init__(self, message, code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['code'] = self.code
        rv['success'] = False
        return rv


class ValidationError(BackOfficeError):
    """输入校验错误"""
    def __init__(self, message="Invalid data", payload=None):
        super().__init__(message, code=400, payload=payload)


class PermissionDenied(BackOfficeError):
    """权限不足"""
    def __init__(self, message="Access denied", payload=None):
        super().__init__(message, code=403, payload=payload)


class NotFound(BackOfficeError):
    """目标记录不存在"""
    def __init__(self, message="Not found", payload=None):
        super().__init__(message, code=404, payload=payload)


class StorageError(BackOfficeError):
    """对象存储上传失败"""
    def __init__(self, message="Upload failed", payload=None):
        super().__init__(message, code=502, payload=payload)
