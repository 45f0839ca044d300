from clinic.models import EmergencyContact


def contact(name, **extra):
    return {'name': name, 'relationship': 'sibling', 'phoneNumber': '555-0100', **extra}


def main_contacts(app, user_id):
    with app.app_context():
        return [c.name for c in EmergencyContact.query.filter_by(user_id=user_id, is_main_contact=True)]


def test_create_and_list(alice, bob):
    response = alice.post('/api/emergency-contacts', json=contact('Marie', email='marie@riverclinic.org', zipCode='75001'))
    assert response.status_code == 201
    body = response.get_json()
    assert body['phoneNumber'] == '555-0100'
    assert body['zipCode'] == '75001'
    assert body['isMainContact'] is False

    assert [c['name'] for c in alice.get('/api/emergency-contacts').get_json()] == ['Marie']
    assert bob.get('/api/emergency-contacts').get_json() == []


def test_required_fields(alice):
    response = alice.post('/api/emergency-contacts', json={'name': 'Marie'})
    assert response.status_code == 400
    fields = {d['field'] for d in response.get_json()['details']}
    assert fields == {'relationship', 'phoneNumber'}


def test_fourth_contact_is_rejected(app, alice, user_ids):
    for name in ('Marie', 'Paul', 'Jeanne'):
        assert alice.post('/api/emergency-contacts', json=contact(name)).status_code == 201

    response = alice.post('/api/emergency-contacts', json=contact('Louis'))
    assert response.status_code == 400
    assert 'Maximum of 3' in response.get_json()['error']

    with app.app_context():
        assert EmergencyContact.query.filter_by(user_id=user_ids['alice']).count() == 3


def test_cap_is_per_user(alice, bob):
    for name in ('Marie', 'Paul', 'Jeanne'):
        alice.post('/api/emergency-contacts', json=contact(name))
    assert bob.post('/api/emergency-contacts', json=contact('Louis')).status_code == 201


def test_set_main_contact_keeps_a_single_main(app, alice, user_ids):
    first = alice.post('/api/emergency-contacts', json=contact('Marie', isMainContact=True)).get_json()
    second = alice.post('/api/emergency-contacts', json=contact('Paul')).get_json()
    assert main_contacts(app, user_ids['alice']) == ['Marie']

    response = alice.put(f"/api/emergency-contacts/{second['id']}/main")
    assert response.status_code == 200
    assert response.get_json()['isMainContact'] is True
    assert main_contacts(app, user_ids['alice']) == ['Paul']

    # Setting the current main again changes nothing
    assert alice.put(f"/api/emergency-contacts/{second['id']}/main").status_code == 200
    assert main_contacts(app, user_ids['alice']) == ['Paul']

    assert alice.put(f"/api/emergency-contacts/{first['id']}/main").status_code == 200
    assert main_contacts(app, user_ids['alice']) == ['Marie']


def test_creating_a_main_contact_demotes_the_previous_one(app, alice, user_ids):
    alice.post('/api/emergency-contacts', json=contact('Marie', isMainContact=True))
    alice.post('/api/emergency-contacts', json=contact('Paul', isMainContact=True))
    assert main_contacts(app, user_ids['alice']) == ['Paul']


def test_updating_main_flag_through_put(app, alice, user_ids):
    marie = alice.post('/api/emergency-contacts', json=contact('Marie', isMainContact=True)).get_json()
    paul = alice.post('/api/emergency-contacts', json=contact('Paul')).get_json()

    response = alice.put(f"/api/emergency-contacts/{paul['id']}", json={'isMainContact': True, 'city': 'Lyon'})
    assert response.status_code == 200
    assert response.get_json()['city'] == 'Lyon'
    assert main_contacts(app, user_ids['alice']) == ['Paul']

    alice.put(f"/api/emergency-contacts/{paul['id']}", json={'isMainContact': False})
    assert main_contacts(app, user_ids['alice']) == []
    assert alice.put(f"/api/emergency-contacts/{marie['id']}", json={'name': 'Marie Curie'}).get_json()['name'] == 'Marie Curie'


def test_main_contact_is_scoped_per_user(app, alice, bob, user_ids):
    alice.post('/api/emergency-contacts', json=contact('Marie', isMainContact=True))
    bob.post('/api/emergency-contacts', json=contact('Louis', isMainContact=True))
    assert main_contacts(app, user_ids['alice']) == ['Marie']
    assert main_contacts(app, user_ids['bob']) == ['Louis']


def test_non_owner_cannot_touch_contact(alice, bob):
    contact_id = alice.post('/api/emergency-contacts', json=contact('Marie')).get_json()['id']

    assert bob.put(f'/api/emergency-contacts/{contact_id}', json={'name': 'Hijacked'}).status_code == 404
    assert bob.put(f'/api/emergency-contacts/{contact_id}/main').status_code == 404
    assert bob.delete(f'/api/emergency-contacts/{contact_id}').status_code == 404
    assert alice.get('/api/emergency-contacts').get_json()[0]['name'] == 'Marie'


def test_update_cannot_null_required_columns(alice):
    contact_id = alice.post('/api/emergency-contacts', json=contact('Marie')).get_json()['id']

    response = alice.put(f'/api/emergency-contacts/{contact_id}', json={'phoneNumber': None, 'relationship': None})
    assert response.status_code == 400
    assert {d['field'] for d in response.get_json()['details']} == {'phoneNumber', 'relationship'}

    response = alice.put(f'/api/emergency-contacts/{contact_id}', json={'city': None, 'name': 'Marie Curie'})
    assert response.status_code == 200
    assert response.get_json()['name'] == 'Marie Curie'
    assert response.get_json()['phoneNumber'] == '555-0100'


def test_owner_can_delete(alice):
    contact_id = alice.post('/api/emergency-contacts', json=contact('Marie')).get_json()['id']
    assert alice.delete(f'/api/emergency-contacts/{contact_id}').status_code == 200
    assert alice.get('/api/emergency-contacts').get_json() == []


def test_new_contact_notifies_clinic(alice, smtp_configured, outbox):
    alice.post('/api/emergency-contacts', json=contact('Marie'))
    assert len(outbox) == 1
    assert outbox[0]['template'] == 'emergency_contact'
    assert outbox[0]['subject'] == 'Emergency contact added'


def test_staff_moderation(alice, subadmin):
    contact_id = alice.post('/api/emergency-contacts', json=contact('Marie')).get_json()['id']

    listing = subadmin.get('/api/admin/emergency-contacts').get_json()
    assert listing[0]['user'] == {'username': 'alice'}

    response = subadmin.put(f'/api/admin/emergency-contacts/{contact_id}', json={'phoneNumber': '555-0199'})
    assert response.status_code == 200
    assert alice.get('/api/emergency-contacts').get_json()[0]['phoneNumber'] == '555-0199'

    assert subadmin.delete(f'/api/admin/emergency-contacts/{contact_id}').status_code == 200
    assert alice.get('/api/emergency-contacts').get_json() == []
    assert subadmin.delete(f'/api/admin/emergency-contacts/{contact_id}').status_code == 404


def test_users_cannot_use_moderation_endpoints(alice):
    contact_id = alice.post('/api/emergency-contacts', json=contact('Marie')).get_json()['id']
    assert alice.delete(f'/api/admin/emergency-contacts/{contact_id}').status_code == 403
