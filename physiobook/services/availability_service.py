"""Read and write therapist availability rules."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from physiobook.auth.identity import CallerIdentity, StaffIdentity, TherapistIdentity
from physiobook.core.errors import Forbidden, InternalError, NotFound
from physiobook.models.availability import Availability
from physiobook.models.physiotherapist import Physiotherapist
from physiobook.models.staff import Staff
from physiobook.schemas.availability import (
    AvailabilityBatchResponse,
    AvailabilityRuleRequest,
    AvailabilityRuleResult,
)

logger = logging.getLogger(__name__)


def list_rules(db: Session, therapist_id: int) -> list[Availability]:
    try:
        return db.query(Availability).filter(
            Availability.therapist_id == therapist_id,
        ).order_by(Availability.start_time.asc(), Availability.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to load availability rules for therapist %s', therapist_id)
        raise InternalError() from exc


def get_therapist(db: Session, therapist_id: int) -> Physiotherapist:
    therapist = db.query(Physiotherapist).filter(Physiotherapist.id == therapist_id).first()
    if therapist is None:
        raise NotFound('No physiotherapist found for the provided ID.')
    return therapist


def ensure_can_edit(db: Session, identity: CallerIdentity, therapist: Physiotherapist) -> None:
    """Allow the therapist themself or staff of the same business."""
    if isinstance(identity, TherapistIdentity) and identity.therapist_id == therapist.id:
        return

    if isinstance(identity, StaffIdentity):
        staff_business_id = db.query(Staff.business_id).filter(Staff.id == identity.staff_id).scalar()
        if staff_business_id is not None and staff_business_id == therapist.business_id:
            return

    raise Forbidden('Only the therapist or staff of their practice can update availability.')


def _find_existing_rule(db: Session, therapist_id: int, rule: AvailabilityRuleRequest) -> Availability | None:
    query = db.query(Availability).filter(Availability.therapist_id == therapist_id)
    if rule.special_date is not None:
        query = query.filter(Availability.special_date == rule.special_date)
    else:
        query = query.filter(
            Availability.day_of_week == rule.day_of_week,
            Availability.special_date.is_(None),
        )
    return query.order_by(Availability.id.asc()).first()


def upsert_rule(db: Session, therapist_id: int, rule: AvailabilityRuleRequest) -> Availability:
    """Insert or update one rule keyed by weekday, or by date for overrides."""
    existing = _find_existing_rule(db, therapist_id, rule)
    if existing is None:
        existing = Availability(therapist_id=therapist_id)
        db.add(existing)

    existing.day_of_week = rule.day_of_week
    existing.start_time = rule.start_time
    existing.end_time = rule.end_time
    existing.is_available = rule.is_available
    existing.special_date = rule.special_date

    db.commit()
    db.refresh(existing)
    return existing


def upsert_rules(db: Session, therapist_id: int, rules: list[AvailabilityRuleRequest]) -> AvailabilityBatchResponse:
    results: list[AvailabilityRuleResult] = []

    for rule in rules:
        try:
            saved = upsert_rule(db, therapist_id, rule)
        except SQLAlchemyError:
            db.rollback()
            logger.exception('Error updating availability rule %s for therapist %s', rule, therapist_id)
            results.append(AvailabilityRuleResult(rule=rule, status='error', error='Unable to save availability.'))
            continue
        results.append(AvailabilityRuleResult(rule=rule, status='success', id=saved.id))

    success_count = sum(1 for result in results if result.status == 'success')
    return AvailabilityBatchResponse(
        message='Processing completed',
        success_count=success_count,
        error_count=len(results) - success_count,
        results=results,
    )


def delete_rule(db: Session, therapist_id: int, rule_id: int) -> None:
    try:
        rule = db.query(Availability).filter(
            Availability.id == rule_id,
            Availability.therapist_id == therapist_id,
        ).first()

        if rule is None:
            raise NotFound('Availability rule not found.')

        db.delete(rule)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to delete availability rule %s', rule_id)
        raise InternalError() from exc
