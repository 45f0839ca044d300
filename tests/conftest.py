# tests/conftest.py
import pytest

from clinic import create_app
from clinic.extensions import db
from clinic.models import Role, User

PASSWORD = 'password123'

ACCOUNTS = {
    'admin': Role.ADMIN,
    'helper': Role.SUBADMIN,
    'alice': Role.USER,
    'bob': Role.USER,
}

SMTP_PAYLOAD = {
    'host': 'smtp.riverclinic.org',
    'port': 587,
    'username': 'mailer',
    'password': 'smtp-secret',
    'fromEmail': 'clinic@riverclinic.org',
    'useTls': True,
}


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        for username, role in ACCOUNTS.items():
            user = User(username=username, email=f'{username}@riverclinic.org', role=role)
            user.set_password(PASSWORD)
            db.session.add(user)
        db.session.commit()
        db.session.remove()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def user_ids(app):
    with app.app_context():
        return {u.username: u.id for u in User.query.all()}


def login(app, username, password=PASSWORD):
    client = app.test_client()
    response = client.post('/api/login', json={'username': username, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def anon(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    return login(app, 'admin')


@pytest.fixture
def subadmin(app):
    return login(app, 'helper')


@pytest.fixture
def alice(app):
    return login(app, 'alice')


@pytest.fixture
def bob(app):
    return login(app, 'bob')


@pytest.fixture
def smtp_configured(admin):
    response = admin.post('/api/admin/smtp-settings', json=SMTP_PAYLOAD)
    assert response.status_code == 200
    return response.get_json()['settings']


@pytest.fixture
def outbox(app):
    return app.extensions['email_dispatcher'].outbox
