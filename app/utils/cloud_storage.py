"""
对象存储工具模块
商品图片优先上传到 Cloudinary，未配置云存储时保存到本地上传目录
"""
import os
import random
import string
import time
import cloudinary
import cloudinary.uploader
from flask import current_app
from app.exceptions import StorageError

# Cloudinary 是否已配置（延迟初始化）
_cloudinary_configured = False


def init_cloud_storage(app):
    """初始化云存储配置"""
    global _cloudinary_configured

    cloudinary_url = app.config.get('CLOUDINARY_URL')
    cloud_name = app.config.get('CLOUDINARY_CLOUD_NAME')
    api_key = app.config.get('CLOUDINARY_API_KEY')
    api_secret = app.config.get('CLOUDINARY_API_SECRET')

    if cloudinary_url or (cloud_name and api_key and api_secret):
        try:
            if cloudinary_url:
                cloudinary.config(cloudinary_url=cloudinary_url)
            else:
                cloudinary.config(
                    cloud_name=cloud_name,
                    api_key=api_key,
                    api_secret=api_secret,
                    secure=True
                )
            _cloudinary_configured = True
            app.logger.info('✅ Cloudinary 云存储已配置')
        except Exception as e:
            app.logger.error(f'❌ Cloudinary 配置失败: {e}')
    else:
        app.logger.info('ℹ️ 未配置云存储，使用本地文件系统')


def is_cloud_storage_enabled():
    """检查云存储是否可用"""
    use_cloud = str(current_app.config.get('USE_CLOUD_STORAGE', 'auto')).lower()

    if use_cloud in ('false', '0'):
        return False
    return _cloudinary_configured


def generate_image_path(file_name, folder='product-images'):
    """
    生成存储路径: {folder}/{毫秒时间戳}-{6位随机串}.{扩展名}
    """
    timestamp = int(time.time() * 1000)
    random_id = ''.join(random.choices(string.ascii_lowercase + string.digits, k=6))
    extension = file_name.split('.')[-1]
    return f'{folder}/{timestamp}-{random_id}.{extension}'


def upload_image(file, path):
    """
    上传图片并返回可访问的 URL

    Args:
        file: 文件对象 (werkzeug FileStorage 或带 read() 的流)
        path: generate_image_path 生成的存储路径

    Raises:
        StorageError: 上传失败，调用方应中止后续写入
    """
    if is_cloud_storage_enabled():
        return _upload_to_cloud(file, path)
    return _save_local(file, path)


def _upload_to_cloud(file, path):
    public_id = path.rsplit('.', 1)[0]
    try:
        result = cloudinary.uploader.upload(
            file,
            public_id=public_id,
            resource_type='image',
            overwrite=True,
        )
    except Exception as e:
        current_app.logger.error(f'❌ 云存储上传失败: {e}')
        raise StorageError(f'图片上传失败: {e}')

    secure_url = result.get('secure_url') or result.get('url')
    if not secure_url:
        raise StorageError('图片上传失败: 未返回 URL')
    current_app.logger.info(f'✅ 图片上传到云存储: {secure_url}')
    return secure_url


def _save_local(file, path):
    upload_folder = current_app.config['UPLOAD_FOLDER']
    save_path = os.path.join(upload_folder, *path.split('/'))
    try:
        os.makedirs(os.path.dirname(save_path), exist_ok=True)
        if hasattr(file, 'save'):
            file.save(save_path)
        else:
            with open(save_path, 'wb') as fh:
                fh.write(file.read())
    except OSError as e:
        current_app.logger.error(f'❌ 本地保存图片失败: {e}')
        raise StorageError(f'图片保存失败: {e}')

    url_prefix = current_app.config.get('UPLOAD_URL_PREFIX', '/static/uploads').rstrip('/')
    current_app.logger.info(f'✅ 图片保存到本地: {save_path}')
    return f'{url_prefix}/{path}'
