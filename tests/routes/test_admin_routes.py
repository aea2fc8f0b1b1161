from datetime import date

from medbook.models.appointment import Appointment
from medbook.models.doctor import AvailabilityStatus, Doctor


def test_admin_doctor_list_includes_notes(client, db_session, make_doctor, admin, auth_headers) -> None:
    doctor = make_doctor(name='Dr. Noted')
    client.post(f'/admin/doctors/{doctor.id}/notes', json={'note': 'Covers Saturday clinic'}, headers=auth_headers(admin))

    response = client.get('/admin/doctors', headers=auth_headers(admin))

    assert response.status_code == 200
    listed = response.json()['doctors'][0]
    assert listed['name'] == 'Dr. Noted'
    assert [note['note'] for note in listed['adminNotes']] == ['Covers Saturday clinic']
    assert listed['adminNotes'][0]['createdBy'] == 'Head Nurse'


def test_admin_routes_reject_patients(client, make_doctor, patient, auth_headers) -> None:
    doctor = make_doctor()

    listing = client.get('/admin/doctors', headers=auth_headers(patient))
    update = client.put(
        f'/admin/doctors/{doctor.id}/availability',
        json={'status': 'on_leave'},
        headers=auth_headers(patient),
    )

    assert listing.status_code == 403
    assert update.status_code == 403
    assert update.json() == {'success': False, 'message': 'Access denied. Admin privileges required.'}


def test_admin_routes_require_token(client, make_doctor) -> None:
    doctor = make_doctor()

    response = client.put(f'/admin/doctors/{doctor.id}/toggle-status')

    assert response.status_code == 401


def test_update_availability_sets_status_and_slots(client, db_session, make_doctor, admin, auth_headers) -> None:
    doctor = make_doctor(status=AvailabilityStatus.ON_LEAVE, available_slots=0)

    response = client.put(
        f'/admin/doctors/{doctor.id}/availability',
        json={'status': 'available', 'availableSlots': 5, 'reason': ' Back from leave '},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body['success'] is True
    assert body['message'] == 'Doctor availability updated successfully.'
    assert body['doctor']['availableSlots'] == 5
    assert body['doctor']['isBookable'] is True
    assert body['doctor']['availability']['status'] == 'available'
    assert body['doctor']['availability']['reason'] == 'Back from leave'
    assert body['doctor']['availability']['updatedBy'] == 'Head Nurse'


def test_update_availability_to_leave_keeps_bookings(
    client,
    db_session,
    make_doctor,
    patient,
    admin,
    store_appointment,
    auth_headers,
) -> None:
    doctor = make_doctor(available_slots=4)
    appointment = store_appointment(patient, doctor, date(2025, 6, 1))

    response = client.put(
        f'/admin/doctors/{doctor.id}/availability',
        json={'status': 'on_leave', 'expectedBackTime': '2025-06-10T09:00:00', 'availableSlots': 4},
        headers=auth_headers(admin),
    )

    body = response.json()
    assert body['doctor']['availableSlots'] == 0
    assert body['doctor']['isBookable'] is False
    assert body['doctor']['availability']['expectedBackTime'].startswith('2025-06-10T09:00:00')
    db_session.refresh(appointment)
    assert appointment.status == 'upcoming'


def test_update_availability_invalid_status_returns_400(client, make_doctor, admin, auth_headers) -> None:
    doctor = make_doctor()

    response = client.put(
        f'/admin/doctors/{doctor.id}/availability',
        json={'status': 'vacation'},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()['success'] is False


def test_update_availability_unknown_doctor_returns_404(client, admin, auth_headers) -> None:
    response = client.put('/admin/doctors/999/availability', json={'status': 'busy'}, headers=auth_headers(admin))

    assert response.status_code == 404


def test_update_availability_of_deactivated_doctor_returns_400(client, make_doctor, admin, auth_headers) -> None:
    doctor = make_doctor(is_active=False, status=AvailabilityStatus.TEMPORARILY_UNAVAILABLE, available_slots=0)

    response = client.put(
        f'/admin/doctors/{doctor.id}/availability',
        json={'status': 'available', 'availableSlots': 3},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400


def test_toggle_status_round_trip(client, db_session, make_doctor, admin, auth_headers) -> None:
    doctor = make_doctor(available_slots=3)

    deactivated = client.put(f'/admin/doctors/{doctor.id}/toggle-status', headers=auth_headers(admin))
    reactivated = client.put(f'/admin/doctors/{doctor.id}/toggle-status', headers=auth_headers(admin))

    assert deactivated.status_code == 200
    assert deactivated.json()['message'] == 'Doctor deactivated successfully.'
    assert deactivated.json()['doctor']['isActive'] is False
    assert deactivated.json()['doctor']['availability']['status'] == 'temporarily_unavailable'
    assert reactivated.json()['message'] == 'Doctor activated successfully.'
    assert reactivated.json()['doctor']['isActive'] is True
    assert reactivated.json()['doctor']['isBookable'] is False

    stored = db_session.query(Doctor).filter(Doctor.id == doctor.id).one()
    assert stored.available_slots == 0


def test_deactivated_doctor_cannot_be_booked(client, db_session, make_doctor, patient, admin, auth_headers) -> None:
    doctor = make_doctor()
    client.put(f'/admin/doctors/{doctor.id}/toggle-status', headers=auth_headers(admin))

    response = client.post(
        '/appointments',
        json={'doctorId': doctor.id, 'slotDate': '2025-06-01', 'slotTime': '10:00 AM'},
        headers=auth_headers(patient),
    )

    assert response.status_code == 400
    assert db_session.query(Appointment).count() == 0


def test_add_note_returns_201(client, make_doctor, admin, auth_headers) -> None:
    doctor = make_doctor()

    response = client.post(
        f'/admin/doctors/{doctor.id}/notes',
        json={'note': 'Running late today'},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    assert response.json()['note']['note'] == 'Running late today'
    assert response.json()['note']['createdBy'] == 'Head Nurse'


def test_add_blank_note_returns_400(client, make_doctor, admin, auth_headers) -> None:
    doctor = make_doctor()

    response = client.post(f'/admin/doctors/{doctor.id}/notes', json={'note': '  '}, headers=auth_headers(admin))

    assert response.status_code == 400
