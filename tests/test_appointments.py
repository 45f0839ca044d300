import pytest

from clinic.models import Appointment, AppointmentStatus, InvalidTransition

SLOT = {'date': '2030-03-10T14:30:00', 'department': 'Cardiology', 'notes': 'annual check'}


def book(client, **overrides):
    response = client.post('/api/appointments', json={**SLOT, **overrides})
    assert response.status_code == 201
    return response.get_json()['appointment']


def test_new_appointment_is_pending(alice):
    appointment = book(alice, status='completed')
    assert appointment['status'] == 'pending'
    assert appointment['date'] == '2030-03-10T14:30:00'


def test_appointment_requires_date_and_department(alice):
    assert alice.post('/api/appointments', json={'department': 'Cardiology'}).status_code == 400
    assert alice.post('/api/appointments', json={'date': 'next tuesday', 'department': 'Cardiology'}).status_code == 400


def test_owner_scoping(alice, bob, admin):
    appointment = book(alice)

    assert alice.get(f"/api/appointments/{appointment['id']}").status_code == 200
    assert bob.get(f"/api/appointments/{appointment['id']}").status_code == 404
    assert bob.put(f"/api/appointments/{appointment['id']}/cancel").status_code == 404
    assert bob.get('/api/appointments').get_json() == []
    assert admin.get(f"/api/appointments/{appointment['id']}").status_code == 200


def test_delete_requires_cancelled_status(alice):
    appointment = book(alice)

    response = alice.delete(f"/api/appointments/{appointment['id']}")
    assert response.status_code == 400
    assert len(alice.get('/api/appointments').get_json()) == 1

    assert alice.put(f"/api/appointments/{appointment['id']}/cancel").status_code == 200
    assert alice.delete(f"/api/appointments/{appointment['id']}").status_code == 200
    assert alice.get('/api/appointments').get_json() == []


def test_completed_appointment_cannot_be_deleted(alice, admin):
    appointment = book(alice)
    admin.put(f"/api/admin/appointments/{appointment['id']}/status", json={'status': 'confirmed'})
    admin.put(f"/api/admin/appointments/{appointment['id']}/status", json={'status': 'completed'})

    assert alice.delete(f"/api/appointments/{appointment['id']}").status_code == 400


def test_cancel_twice_is_rejected(alice):
    appointment = book(alice)
    assert alice.put(f"/api/appointments/{appointment['id']}/cancel").status_code == 200
    assert alice.put(f"/api/appointments/{appointment['id']}/cancel").status_code == 400


def test_reschedule_keeps_status(alice, admin):
    appointment = book(alice)
    admin.put(f"/api/admin/appointments/{appointment['id']}/status", json={'status': 'confirmed'})

    response = alice.put(f"/api/appointments/{appointment['id']}/reschedule", json={'date': '2030-04-01T09:00:00'})
    assert response.status_code == 200
    moved = response.get_json()['appointment']
    assert moved['date'] == '2030-04-01T09:00:00'
    assert moved['status'] == 'confirmed'

    pending = book(alice)
    response = alice.put(f"/api/appointments/{pending['id']}/reschedule", json={'date': '2030-05-01T09:00:00'})
    assert response.get_json()['appointment']['status'] == 'pending'


def test_terminal_appointment_cannot_be_rescheduled(alice):
    appointment = book(alice)
    alice.put(f"/api/appointments/{appointment['id']}/cancel")

    response = alice.put(f"/api/appointments/{appointment['id']}/reschedule", json={'date': '2030-04-01T09:00:00'})
    assert response.status_code == 400


def test_admin_drives_the_state_machine(alice, admin):
    appointment = book(alice)
    path = f"/api/admin/appointments/{appointment['id']}/status"

    assert admin.put(path, json={'status': 'completed'}).status_code == 400
    assert admin.put(path, json={'status': 'confirmed'}).get_json()['appointment']['status'] == 'confirmed'
    assert admin.put(path, json={'status': 'pending'}).status_code == 400
    assert admin.put(path, json={'status': 'completed'}).get_json()['appointment']['status'] == 'completed'
    assert admin.put(path, json={'status': 'cancelled'}).status_code == 400
    assert admin.put(path, json={'status': 'archived'}).status_code == 400


def test_only_admin_changes_status(alice, subadmin):
    appointment = book(alice)
    path = f"/api/admin/appointments/{appointment['id']}/status"
    assert alice.put(path, json={'status': 'confirmed'}).status_code == 403
    assert subadmin.put(path, json={'status': 'confirmed'}).status_code == 403


def test_status_update_for_missing_appointment(admin):
    assert admin.put('/api/admin/appointments/4242/status', json={'status': 'confirmed'}).status_code == 404


@pytest.mark.parametrize('start, target, allowed', [
    (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED, True),
    (AppointmentStatus.PENDING, AppointmentStatus.CANCELLED, True),
    (AppointmentStatus.PENDING, AppointmentStatus.COMPLETED, False),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, True),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED, True),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.PENDING, False),
    (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, False),
    (AppointmentStatus.CANCELLED, AppointmentStatus.CONFIRMED, False),
])
def test_transition_table(start, target, allowed):
    appointment = Appointment(status=start)
    if allowed:
        appointment.transition_to(target)
        assert appointment.status == target
    else:
        with pytest.raises(InvalidTransition):
            appointment.transition_to(target)
        assert appointment.status == start
