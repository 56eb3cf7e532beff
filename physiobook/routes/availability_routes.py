from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from physiobook.auth.dependencies import get_current_identity
from physiobook.auth.identity import CallerIdentity
from physiobook.database import get_db
from physiobook.routes import common
from physiobook.schemas.availability import (
    AvailabilityBatchResponse,
    AvailabilityRuleRequest,
    AvailabilityRuleResponse,
    MaterializedSlot,
)
from physiobook.services import availability_service, slot_service

router = APIRouter(tags=['availability'])


@router.get('/{therapist_id}/availability', response_model=list[MaterializedSlot])
def get_availability(
    therapist_id: int,
    include_booked: bool = Query(default=False),
    today: date = Depends(common.get_today),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    return slot_service.get_available_slots(db, therapist_id, today, hide_booked=not include_booked)


@router.get('/{therapist_id}/availability/rules', response_model=list[AvailabilityRuleResponse])
def list_availability_rules(therapist_id: int, db: Session = Depends(get_db)):
    common.ensure_database_ready()

    return availability_service.list_rules(db, therapist_id)


@router.patch('/{therapist_id}/availability', response_model=AvailabilityBatchResponse)
def update_availability(
    therapist_id: int,
    rules: list[AvailabilityRuleRequest],
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    therapist = availability_service.get_therapist(db, therapist_id)
    availability_service.ensure_can_edit(db, identity, therapist)

    return availability_service.upsert_rules(db, therapist.id, rules)


@router.delete('/{therapist_id}/availability/{rule_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_availability_rule(
    therapist_id: int,
    rule_id: int,
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    therapist = availability_service.get_therapist(db, therapist_id)
    availability_service.ensure_can_edit(db, identity, therapist)

    availability_service.delete_rule(db, therapist.id, rule_id)
