from datetime import timedelta

from clinic.extensions import db
from clinic.models import Appointment, AppointmentStatus, Medication
from clinic.utils.dates import utcnow


def test_user_listing(admin):
    users = admin.get('/api/admin/users').get_json()
    assert sorted(u['username'] for u in users) == ['admin', 'alice', 'bob', 'helper']
    assert all('passwordHash' not in u and 'password_hash' not in u for u in users)


def test_user_details(admin, alice, user_ids):
    alice.post('/api/medical-records', json={'name': 'Alice Moreau', 'birthDate': '1985-04-12'})
    alice.post('/api/emergency-contacts', json={'name': 'Marie', 'relationship': 'sister', 'phoneNumber': '555-0100'})

    response = admin.get(f"/api/admin/user-details/{user_ids['alice']}")
    assert response.status_code == 200
    details = response.get_json()
    assert details['user']['username'] == 'alice'
    assert [r['name'] for r in details['medicalRecords']] == ['Alice Moreau']
    assert [c['name'] for c in details['emergencyContacts']] == ['Marie']
    assert details['appointments'] == []
    assert details['medications'] == []

    assert admin.get('/api/admin/user-details/9999').status_code == 404


def test_stats(app, admin, user_ids):
    now = utcnow()
    with app.app_context():
        db.session.add_all([
            Appointment(user_id=user_ids['alice'], date=now.replace(hour=12, minute=0), department='Cardiology'),
            Appointment(user_id=user_ids['bob'], date=now + timedelta(days=3), department='Dermatology'),
            Medication(user_id=user_ids['alice'], name='Metformin', dosage='500mg', frequency='daily',
                       start_date=now - timedelta(days=10)),
            Medication(user_id=user_ids['bob'], name='Amoxicillin', dosage='250mg', frequency='daily',
                       start_date=now - timedelta(days=30), end_date=now - timedelta(days=20)),
        ])
        db.session.commit()

    stats = admin.get('/api/admin/stats').get_json()
    assert stats == {'totalPatients': 2, 'todayAppointments': 1, 'activePrescriptions': 1}


def test_recent_appointments_are_capped_and_ordered(app, admin, user_ids):
    start = utcnow()
    with app.app_context():
        for offset in range(7):
            db.session.add(Appointment(user_id=user_ids['alice'], date=start + timedelta(days=offset),
                                       department=f'Dept {offset}', status=AppointmentStatus.PENDING))
        db.session.commit()

    recent = admin.get('/api/admin/recent-appointments').get_json()
    assert [a['department'] for a in recent] == ['Dept 6', 'Dept 5', 'Dept 4', 'Dept 3', 'Dept 2']
    assert all(a['patientName'] == 'alice' for a in recent)


def test_staff_listings_are_cross_user_and_tagged(alice, bob, subadmin):
    alice.post('/api/blood-pressure', json={'systolic': 120, 'diastolic': 80})
    bob.post('/api/blood-pressure', json={'systolic': 135, 'diastolic': 88})
    alice.post('/api/blood-sugar', json={'bloodSugar': 98})
    bob.post('/api/disease-histories', json={'diseaseName': 'Asthma'})
    alice.post('/api/medications', json={
        'name': 'Metformin', 'dosage': '500mg', 'frequency': 'daily', 'startDate': '2024-01-01T00:00:00',
    })
    alice.post('/api/appointments', json={'date': '2030-01-01T09:00:00', 'department': 'Cardiology'})

    readings = subadmin.get('/api/admin/blood-pressure').get_json()
    assert sorted((r['user']['username'], r['systolic']) for r in readings) == [('alice', 120), ('bob', 135)]

    assert subadmin.get('/api/admin/blood-sugar').get_json()[0]['user'] == {'username': 'alice'}
    assert subadmin.get('/api/admin/disease-histories').get_json()[0]['user'] == {'username': 'bob'}
    assert subadmin.get('/api/admin/medications').get_json()[0]['name'] == 'Metformin'
    assert subadmin.get('/api/admin/appointments').get_json()[0]['department'] == 'Cardiology'
    assert subadmin.get('/api/admin/medical-records').get_json() == []
