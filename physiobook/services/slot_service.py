"""Bookable-slot computation for the rolling seven-day window.

Recurring weekly rules and date overrides are expanded into hourly start times
for today through today+6 (UTC). A date with at least one valid override uses
only its overrides; otherwise the recurring rules for that weekday apply.
"""

import logging
from datetime import date
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from physiobook.core.errors import InternalError
from physiobook.models.availability import Availability
from physiobook.schemas.availability import MaterializedSlot
from physiobook.services import appointment_service, availability_service
from physiobook.services.date_utils import (
    add_one_hour,
    calculate_date_for_day,
    generate_week_dates,
    get_day_of_week,
    is_afternoon,
    is_morning,
    normalize_time,
    time_to_minutes,
    validate_special_date,
)

logger = logging.getLogger(__name__)


def _resolve_rule_date(rule: Availability, today: date) -> str | None:
    if rule.special_date is not None:
        date_key = validate_special_date(rule.special_date, rule.day_of_week, today)
        if date_key is None:
            logger.warning(
                'Skipping availability rule %s: special date %s is past or not a %s',
                rule.id, rule.special_date, rule.day_of_week,
            )
        return date_key

    try:
        return calculate_date_for_day(rule.day_of_week, today)
    except ValueError:
        logger.warning('Skipping availability rule %s: unknown day of week %r', rule.id, rule.day_of_week)
        return None


def _fill_hours(slot: MaterializedSlot, rule: Availability) -> None:
    try:
        current_time = normalize_time(rule.start_time)
        end_minutes = time_to_minutes(rule.end_time)
    except ValueError:
        logger.warning('Skipping availability rule %s: bad time range %r-%r', rule.id, rule.start_time, rule.end_time)
        return

    while time_to_minutes(current_time) < end_minutes:
        if is_morning(current_time):
            slot.morning.append(current_time)
            slot.unavailable = False
        elif is_afternoon(current_time):
            slot.afternoon.append(current_time)
            slot.unavailable = False
        current_time = add_one_hour(current_time)


def materialize_week(rules: Iterable[Availability], today: date) -> list[MaterializedSlot]:
    """Expand availability rules into exactly seven dated entries starting at ``today``."""
    week_dates = generate_week_dates(today)
    slots_by_date = {
        date_key: MaterializedSlot(date=date_key, day_of_week=get_day_of_week(date_key))
        for date_key in week_dates
    }

    recurring_by_date: dict[str, list[Availability]] = {}
    overrides_by_date: dict[str, list[Availability]] = {}

    for rule in rules:
        date_key = _resolve_rule_date(rule, today)
        if date_key is None:
            continue
        if date_key not in slots_by_date:
            logger.debug('Dropping availability rule %s: %s is outside the booking window', rule.id, date_key)
            continue

        target = overrides_by_date if rule.special_date is not None else recurring_by_date
        target.setdefault(date_key, []).append(rule)

    for date_key, slot in slots_by_date.items():
        applicable = overrides_by_date.get(date_key) or recurring_by_date.get(date_key, [])
        for rule in applicable:
            if rule.start_time and rule.end_time and rule.is_available:
                _fill_hours(slot, rule)

    return list(slots_by_date.values())


def hide_booked_times(slots: list[MaterializedSlot], booked: dict[str, set[str]]) -> list[MaterializedSlot]:
    for slot in slots:
        taken = booked.get(slot.date)
        if not taken:
            continue
        slot.morning = [time_value for time_value in slot.morning if time_value not in taken]
        slot.afternoon = [time_value for time_value in slot.afternoon if time_value not in taken]
    return slots


def get_available_slots(
    db: Session,
    therapist_id: int,
    today: date,
    hide_booked: bool = True,
) -> list[MaterializedSlot]:
    rules = availability_service.list_rules(db, therapist_id)
    slots = materialize_week(rules, today)

    if hide_booked:
        try:
            booked = appointment_service.list_booked_times(
                db,
                therapist_id,
                [date.fromisoformat(slot.date) for slot in slots],
            )
        except SQLAlchemyError as exc:
            logger.exception('Failed to load booked times for therapist %s', therapist_id)
            raise InternalError() from exc
        slots = hide_booked_times(slots, booked)

    return slots
