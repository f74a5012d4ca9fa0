import io
import os
import re

import pytest
from werkzeug.datastructures import FileStorage

from app.exceptions import StorageError
from app.services.inventory_service import InventoryService
from app.utils import cloud_storage
from app.utils.cloud_storage import generate_image_path, upload_image


def test_generated_path_format():
    path = generate_image_path('photo.final.PNG')

    assert re.fullmatch(r'product-images/\d{13}-[a-z0-9]{6}\.PNG', path)


def test_generated_paths_differ():
    assert generate_image_path('a.jpg') != generate_image_path('a.jpg')


def test_local_upload_returns_static_url(app, ctx):
    path = 'product-images/1700000000000-abc123.png'

    url = upload_image(io.BytesIO(b'png-bytes'), path)

    assert url == '/static/uploads/product-images/1700000000000-abc123.png'
    saved = os.path.join(app.config['UPLOAD_FOLDER'], 'product-images', '1700000000000-abc123.png')
    with open(saved, 'rb') as fh:
        assert fh.read() == b'png-bytes'


def test_cloud_upload_uses_path_without_extension(app, ctx, monkeypatch):
    calls = {}

    def fake_upload(file, **kwargs):
        calls.update(kwargs)
        return {'secure_url': 'https://res.cloudinary.com/demo/product-images/1-abc.png'}

    app.config['USE_CLOUD_STORAGE'] = 'auto'
    monkeypatch.setattr(cloud_storage, '_cloudinary_configured', True)
    monkeypatch.setattr(cloud_storage.cloudinary.uploader, 'upload', fake_upload)

    url = upload_image(io.BytesIO(b'x'), 'product-images/1-abc.png')

    assert url.startswith('https://res.cloudinary.com/')
    assert calls['public_id'] == 'product-images/1-abc'


def test_failed_upload_prevents_product_creation(app, ctx, monkeypatch):
    def broken_upload(file, **kwargs):
        raise IOError('network unreachable')

    app.config['USE_CLOUD_STORAGE'] = 'true'
    monkeypatch.setattr(cloud_storage, '_cloudinary_configured', True)
    monkeypatch.setattr(cloud_storage.cloudinary.uploader, 'upload', broken_upload)

    image = FileStorage(stream=io.BytesIO(b'x'), filename='shirt.jpg')

    with pytest.raises(StorageError):
        InventoryService.record_creation('Shirt', quantity=3, image_file=image)

    assert InventoryService.list_products() == []
