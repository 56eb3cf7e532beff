from physiobook.models.availability import Availability
from physiobook.models.user import User


def _book(client, auth_header, practice, user, **fields):
    payload = {'therapist_id': practice.therapist.id, 'appointment_date': '2026-01-12', 'time': '09:00'}
    payload.update(fields)
    return client.post('/booking/appointments', json=payload, headers=auth_header(user))


def test_root_reports_health(client) -> None:
    assert client.get('/').json() == {'status': 'Physiotherapy Booking API Running'}


def test_create_appointment_requires_token(client, practice) -> None:
    response = client.post(
        '/booking/appointments',
        json={'therapist_id': practice.therapist.id, 'appointment_date': '2026-01-12', 'time': '09:00'},
    )

    assert response.status_code == 401


def test_create_appointment_reports_missing_date(client, auth_header, practice) -> None:
    response = _book(client, auth_header, practice, practice.patient_user, appointment_date=None)

    assert response.status_code == 400
    assert response.json() == {'detail': 'appointment_date is required.'}


def test_create_appointment_as_patient(client, auth_header, practice) -> None:
    response = _book(client, auth_header, practice, practice.patient_user, consultation_type='Initial assessment')

    assert response.status_code == 201
    body = response.json()
    assert body['status'] == 'pending'
    assert body['staff_id'] == practice.staff.id
    assert body['appointment_date'] == '2026-01-12'
    assert body['consultation_type'] == 'Initial assessment'
    assert body['plan_id'] is None


def test_create_appointment_as_staff_is_not_found(client, auth_header, practice) -> None:
    response = _book(client, auth_header, practice, practice.staff_user)

    assert response.status_code == 404
    assert response.json() == {'detail': 'No patient found for the provided identity.'}


def test_second_booking_for_same_slot_conflicts(client, auth_header, practice) -> None:
    assert _book(client, auth_header, practice, practice.patient_user).status_code == 201

    response = _book(client, auth_header, practice, practice.other_patient_user, time='9:00')

    assert response.status_code == 409
    assert response.json() == {'detail': 'This time slot is already booked.'}


def test_booked_time_disappears_from_availability(client, auth_header, db_session, practice) -> None:
    db_session.add(Availability(
        therapist_id=practice.therapist.id,
        day_of_week='Monday',
        start_time='09:00',
        end_time='11:00',
        is_available=True,
    ))
    db_session.commit()

    _book(client, auth_header, practice, practice.patient_user)

    slots = client.get(f'/therapists/{practice.therapist.id}/availability').json()
    monday = next(entry for entry in slots if entry['date'] == '2026-01-12')
    assert monday['morning'] == ['10:00']

    slots = client.get(f'/therapists/{practice.therapist.id}/availability', params={'include_booked': True}).json()
    monday = next(entry for entry in slots if entry['date'] == '2026-01-12')
    assert monday['morning'] == ['09:00', '10:00']


def test_list_and_get_appointments(client, auth_header, practice) -> None:
    created = _book(client, auth_header, practice, practice.patient_user).json()

    listed = client.get('/booking/appointments', headers=auth_header(practice.staff_user))
    fetched = client.get(f"/booking/appointments/{created['id']}", headers=auth_header(practice.therapist_user))
    hidden = client.get(f"/booking/appointments/{created['id']}", headers=auth_header(practice.second_staff_user))

    assert listed.status_code == 200
    assert [item['id'] for item in listed.json()] == [created['id']]
    assert listed.json()[0]['patient_name'] == 'Mei Ling'
    assert fetched.json()['therapist_name'] == 'Dr. Tan'
    assert hidden.status_code == 404


def test_cancel_then_rebook(client, auth_header, practice) -> None:
    created = _book(client, auth_header, practice, practice.patient_user).json()

    cancelled = client.patch(f"/booking/appointments/{created['id']}/cancel", headers=auth_header(practice.patient_user))
    rebooked = _book(client, auth_header, practice, practice.other_patient_user)

    assert cancelled.status_code == 200
    assert cancelled.json()['status'] == 'Cancelled'
    assert rebooked.status_code == 201


def test_confirm_by_assigned_staff(client, auth_header, practice) -> None:
    created = _book(client, auth_header, practice, practice.patient_user).json()

    confirmed = client.patch(f"/booking/appointments/{created['id']}/confirm", headers=auth_header(practice.staff_user))
    cancel_after = client.patch(f"/booking/appointments/{created['id']}/cancel", headers=auth_header(practice.patient_user))

    assert confirmed.json()['status'] == 'Ongoing'
    assert cancel_after.status_code == 409


def test_create_appointment_for_patient_account_without_profile_is_not_found(client, auth_header, db_session, practice) -> None:
    user = User(email='unlinked@example.test', name='Unlinked', role='patient')
    db_session.add(user)
    db_session.commit()

    response = _book(client, auth_header, practice, user)

    assert response.status_code == 404
    assert response.json() == {'detail': 'No patient found for the provided identity.'}


def test_list_appointments_for_account_without_profile_is_forbidden(client, auth_header, db_session) -> None:
    user = User(email='unlinked@example.test', name='Unlinked', role='therapist')
    db_session.add(user)
    db_session.commit()

    response = client.get('/booking/appointments', headers=auth_header(user))

    assert response.status_code == 403
