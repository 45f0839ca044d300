from datetime import timedelta

from clinic.extensions import db
from clinic.models import Invitation, Role, User
from clinic.utils.dates import utcnow


def invite(admin, email='nurse@riverclinic.org', role='subadmin'):
    response = admin.post('/api/admin/invite', json={'email': email, 'role': role})
    assert response.status_code == 201
    return response.get_json()['invitation']


def test_admin_creates_seven_day_invitation(app, admin):
    invitation = invite(admin)
    assert len(invitation['token']) == 64
    assert invitation['role'] == 'subadmin'

    with app.app_context():
        stored = Invitation.query.filter_by(token=invitation['token']).one()
        remaining = stored.expires_at - utcnow()
        assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)


def test_invitation_is_emailed_to_invitee(admin, smtp_configured, outbox):
    invitation = invite(admin)

    assert len(outbox) == 1
    mail = outbox[0]
    assert mail['template'] == 'invitation'
    assert mail['to'] == 'nurse@riverclinic.org'
    assert f"http://portal.test/invite/{invitation['token']}" in mail['message'].as_string()


def test_invitation_without_mail_setup_still_succeeds(admin):
    response = admin.post('/api/admin/invite', json={'email': 'nurse@riverclinic.org', 'role': 'user'})
    assert response.status_code == 201
    assert response.get_json()['emailSent'] is False


def test_invitation_role_is_restricted(admin, subadmin, alice):
    assert admin.post('/api/admin/invite', json={'email': 'x@riverclinic.org', 'role': 'admin'}).status_code == 400
    assert admin.post('/api/admin/invite', json={'email': 'not-an-email', 'role': 'user'}).status_code == 400
    assert subadmin.post('/api/admin/invite', json={'email': 'x@riverclinic.org', 'role': 'user'}).status_code == 403
    assert alice.post('/api/admin/invite', json={'email': 'x@riverclinic.org', 'role': 'user'}).status_code == 403


def test_check_invitation(admin, anon):
    invitation = invite(admin)

    response = anon.get(f"/api/invitations/{invitation['token']}")
    assert response.status_code == 200
    assert response.get_json()['valid'] is True
    assert response.get_json()['email'] == 'nurse@riverclinic.org'

    assert anon.get('/api/invitations/deadbeef').status_code == 400


def test_accepting_creates_user_and_consumes_invitation(app, admin, anon):
    invitation = invite(admin)

    response = anon.post(f"/api/invitations/{invitation['token']}/accept",
                         json={'username': 'nurse', 'password': 'welcome-aboard'})
    assert response.status_code == 201
    assert response.get_json()['user']['role'] == 'subadmin'

    with app.app_context():
        users = User.query.filter_by(username='nurse').all()
        assert len(users) == 1
        assert users[0].email == 'nurse@riverclinic.org'
        assert users[0].role == Role.SUBADMIN
        assert Invitation.query.count() == 0

    login = app.test_client().post('/api/login', json={'username': 'nurse', 'password': 'welcome-aboard'})
    assert login.status_code == 200

    replay = anon.post(f"/api/invitations/{invitation['token']}/accept",
                       json={'username': 'nurse2', 'password': 'welcome-aboard'})
    assert replay.status_code == 400


def test_unknown_token_creates_nothing(app, anon):
    user_count = _user_count(app)
    response = anon.post('/api/invitations/0123456789abcdef/accept', json={'username': 'ghost', 'password': 'welcome-aboard'})
    assert response.status_code == 400
    assert _user_count(app) == user_count


def test_expired_token_creates_nothing(app, admin, anon):
    invitation = invite(admin)
    with app.app_context():
        Invitation.query.filter_by(token=invitation['token']).update({'expires_at': utcnow() - timedelta(minutes=1)})
        db.session.commit()

    user_count = _user_count(app)
    response = anon.post(f"/api/invitations/{invitation['token']}/accept",
                         json={'username': 'late', 'password': 'welcome-aboard'})
    assert response.status_code == 400
    assert _user_count(app) == user_count
    assert anon.get(f"/api/invitations/{invitation['token']}").status_code == 400


def test_taken_username_keeps_invitation(app, admin, anon):
    invitation = invite(admin)
    response = anon.post(f"/api/invitations/{invitation['token']}/accept",
                         json={'username': 'alice', 'password': 'welcome-aboard'})
    assert response.status_code == 400

    with app.app_context():
        assert Invitation.query.count() == 1


def test_subadmin_listing(admin, anon):
    invitation = invite(admin)
    anon.post(f"/api/invitations/{invitation['token']}/accept", json={'username': 'nurse', 'password': 'welcome-aboard'})

    usernames = [u['username'] for u in admin.get('/api/admin/subadmins').get_json()]
    assert sorted(usernames) == ['helper', 'nurse']


def _user_count(app):
    with app.app_context():
        return User.query.count()
