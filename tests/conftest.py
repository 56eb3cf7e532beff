import os
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from physiobook.auth.identity import (  # noqa: E402
    BusinessIdentity,
    PatientIdentity,
    StaffIdentity,
    TherapistIdentity,
)
from physiobook.database import Base  # noqa: E402
from physiobook.models.appointment import Appointment  # noqa: E402, F401
from physiobook.models.availability import Availability  # noqa: E402, F401
from physiobook.models.business import BusinessEntity  # noqa: E402
from physiobook.models.patient import Patient  # noqa: E402
from physiobook.models.physiotherapist import Physiotherapist  # noqa: E402
from physiobook.models.staff import Staff  # noqa: E402
from physiobook.models.user import User  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def _add_user(db, email: str, name: str, role: str) -> User:
    user = User(email=email, name=name, role=role, hashed_password='')
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def practice(db_session):
    """One business with two therapists, two staff members and two patients."""
    db = db_session

    owner = _add_user(db, 'owner@clinic.test', 'Clinic Owner', 'business')
    business = BusinessEntity(user_id=owner.id, company_name='Back In Motion Physio')
    db.add(business)
    db.flush()

    therapist_user = _add_user(db, 'therapist@clinic.test', 'Dr. Tan', 'therapist')
    therapist = Physiotherapist(user_id=therapist_user.id, business_id=business.id, specialization='Sports')
    other_therapist_user = _add_user(db, 'second@clinic.test', 'Dr. Lim', 'therapist')
    other_therapist = Physiotherapist(user_id=other_therapist_user.id, business_id=business.id, specialization='Neuro')
    db.add_all([therapist, other_therapist])

    staff_user = _add_user(db, 'frontdesk@clinic.test', 'Aisyah', 'staff')
    staff = Staff(user_id=staff_user.id, business_id=business.id, role='reception')
    second_staff_user = _add_user(db, 'backoffice@clinic.test', 'Ravi', 'staff')
    second_staff = Staff(user_id=second_staff_user.id, business_id=business.id, role='reception')
    db.add(staff)
    db.flush()
    db.add(second_staff)

    patient_user = _add_user(db, 'patient@example.test', 'Mei Ling', 'patient')
    patient = Patient(user_id=patient_user.id, gender='Female')
    other_patient_user = _add_user(db, 'other@example.test', 'Arjun', 'patient')
    other_patient = Patient(user_id=other_patient_user.id, gender='Male')
    db.add_all([patient, other_patient])
    db.commit()

    return SimpleNamespace(
        owner=owner,
        business=business,
        therapist_user=therapist_user,
        therapist=therapist,
        other_therapist=other_therapist,
        staff_user=staff_user,
        staff=staff,
        second_staff_user=second_staff_user,
        second_staff=second_staff,
        patient_user=patient_user,
        patient=patient,
        other_patient_user=other_patient_user,
        other_patient=other_patient,
        patient_identity=PatientIdentity(user_id=patient_user.id, patient_id=patient.id),
        other_patient_identity=PatientIdentity(user_id=other_patient_user.id, patient_id=other_patient.id),
        therapist_identity=TherapistIdentity(user_id=therapist_user.id, therapist_id=therapist.id),
        other_therapist_identity=TherapistIdentity(user_id=other_therapist_user.id, therapist_id=other_therapist.id),
        staff_identity=StaffIdentity(user_id=staff_user.id, staff_id=staff.id),
        second_staff_identity=StaffIdentity(user_id=second_staff_user.id, staff_id=second_staff.id),
        business_identity=BusinessIdentity(user_id=owner.id, business_id=business.id),
    )
