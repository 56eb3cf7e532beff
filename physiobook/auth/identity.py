"""Caller identities.

A signed-in account acts in exactly one role. Each role is its own model so a
caller can never carry, say, both a patient id and a therapist id. An account
whose profile row is missing resolves to ``AccountIdentity``, which no service
will treat as a patient, therapist, staff member or business.
"""

import logging
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from physiobook.core.errors import Unauthorized
from physiobook.models.business import BusinessEntity
from physiobook.models.patient import Patient
from physiobook.models.physiotherapist import Physiotherapist
from physiobook.models.staff import Staff
from physiobook.models.user import ROLE_BUSINESS, ROLE_PATIENT, ROLE_STAFF, ROLE_THERAPIST, User

logger = logging.getLogger(__name__)


class _Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int


class PatientIdentity(_Identity):
    kind: Literal['patient'] = 'patient'
    patient_id: int


class TherapistIdentity(_Identity):
    kind: Literal['therapist'] = 'therapist'
    therapist_id: int


class StaffIdentity(_Identity):
    kind: Literal['staff'] = 'staff'
    staff_id: int


class BusinessIdentity(_Identity):
    kind: Literal['business'] = 'business'
    business_id: int


class AccountIdentity(_Identity):
    """A signed-in account whose role has no profile row yet."""

    kind: Literal['account'] = 'account'
    role: str


CallerIdentity = Annotated[
    Union[PatientIdentity, TherapistIdentity, StaffIdentity, BusinessIdentity, AccountIdentity],
    Field(discriminator='kind'),
]

_PROFILE_LOOKUPS = {
    ROLE_PATIENT: (Patient, PatientIdentity, 'patient_id'),
    ROLE_THERAPIST: (Physiotherapist, TherapistIdentity, 'therapist_id'),
    ROLE_STAFF: (Staff, StaffIdentity, 'staff_id'),
    ROLE_BUSINESS: (BusinessEntity, BusinessIdentity, 'business_id'),
}


def resolve_identity(db: Session, user: User) -> CallerIdentity:
    """Map an account to the profile row of its role."""
    role = (user.role or '').strip().lower()
    lookup = _PROFILE_LOOKUPS.get(role)
    if lookup is None:
        raise Unauthorized(f'Unsupported account role: {user.role}.')

    model, identity_cls, id_field = lookup
    profile_id = db.query(model.id).filter(model.user_id == user.id).order_by(model.id.asc()).limit(1).scalar()
    if profile_id is None:
        logger.info('User %s has role %s but no profile row', user.id, role)
        return AccountIdentity(user_id=user.id, role=role)

    return identity_cls(user_id=user.id, **{id_field: profile_id})
