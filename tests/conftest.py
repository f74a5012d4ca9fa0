import pytest

from app import create_app
from app.extensions import db
from app.models import User


@pytest.fixture()
def app(tmp_path):
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ctx(app):
    """服务层测试使用的应用上下文"""
    with app.app_context():
        yield
        db.session.remove()


@pytest.fixture()
def admin(ctx):
    user = User(uid='admin-1', email='admin@shop.local', first_name='Ad', last_name='Min',
                role=User.ROLE_ADMIN)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def staff(ctx):
    user = User(uid='staff-1', email='staff@shop.local', first_name='Somchai', last_name='Jaidee',
                role=User.ROLE_STAFF)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def login(app):
    """返回已登录指定用户的测试客户端"""
    def _login(user_id):
        client = app.test_client()
        with client.session_transaction() as sess:
            sess['_user_id'] = str(user_id)
            sess['_fresh'] = True
        return client
    return _login
