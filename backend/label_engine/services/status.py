"""Overall label status, correction deadlines and read-time expiration."""

from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional
import logging
import math

from ..config import Settings, get_settings
from ..models.schemas import (
    BeverageType,
    ComparisonStatus,
    DeadlineInfo,
    LabelStatus,
    StatusDecision,
    Urgency,
)
from .background import fire_and_forget
from .collaborators import StatusWriter
from .regulations import HEALTH_WARNING_FIELD, is_valid_size, mandatory_fields

logger = logging.getLogger(__name__)

_FAILED = (ComparisonStatus.MISMATCH, ComparisonStatus.NOT_FOUND)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def determine_overall_status(
    field_statuses: Mapping[str, ComparisonStatus],
    beverage_type: BeverageType,
    container_size_ml: Optional[float] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> StatusDecision:
    """
    Reduce per-field comparison outcomes to one label status.

    Rules apply in order and the first that fires decides:
    1. Container size not a legal standard of fill -> rejected
    2. Health warning missing or wrong -> rejected
    3. Substantive field wrong or missing -> needs_correction (30 days)
    4. Only minor discrepancies -> conditionally_approved (7 days)
    5. Otherwise approved

    A minor field that is mandatory for the beverage type but absent
    from the label counts as substantive; an absent optional minor
    field is ignored.
    """
    settings = settings or get_settings()
    now = _as_utc(now or utc_now())
    minor = settings.minor_discrepancy_fields
    mandatory = set(mandatory_fields(beverage_type))

    if container_size_ml is not None and not is_valid_size(beverage_type, container_size_ml):
        return StatusDecision(
            status=LabelStatus.REJECTED,
            reasoning=(
                f"{container_size_ml:g} mL is not an authorized standard of fill "
                f"for {beverage_type.value}."
            ),
        )

    if field_statuses.get(HEALTH_WARNING_FIELD) in _FAILED:
        return StatusDecision(
            status=LabelStatus.REJECTED,
            reasoning="Health warning statement is missing or does not match.",
        )

    substantive = []
    discrepancies = []
    for field_name, status in field_statuses.items():
        if status == ComparisonStatus.MATCH:
            continue
        if field_name not in minor:
            substantive.append(field_name)
        elif status == ComparisonStatus.NOT_FOUND:
            if field_name in mandatory:
                substantive.append(field_name)
        else:
            discrepancies.append(field_name)

    if substantive:
        days = settings.correction_deadline_days
        return StatusDecision(
            status=LabelStatus.NEEDS_CORRECTION,
            deadline_days=days,
            correction_deadline=now + timedelta(days=days),
            reasoning=f"Fields need correction: {', '.join(substantive)}.",
        )

    if discrepancies:
        days = settings.conditional_deadline_days
        return StatusDecision(
            status=LabelStatus.CONDITIONALLY_APPROVED,
            deadline_days=days,
            correction_deadline=now + timedelta(days=days),
            reasoning=f"Minor discrepancies: {', '.join(discrepancies)}.",
        )

    return StatusDecision(status=LabelStatus.APPROVED, reasoning="All fields match.")


def effective_status(
    stored_status: LabelStatus,
    correction_deadline: Optional[datetime],
    now: Optional[datetime] = None,
    deadline_expired: bool = False,
) -> LabelStatus:
    """
    Status as of ``now``, applying any lapsed correction deadline.

    needs_correction past its deadline reads as rejected and
    conditionally_approved past its deadline reads as needs_correction.
    ``deadline_expired`` forces the lapse when storage already recorded it.
    """
    if correction_deadline is None:
        return stored_status

    now = _as_utc(now or utc_now())
    lapsed = deadline_expired or _as_utc(correction_deadline) < now
    if not lapsed:
        return stored_status

    if stored_status == LabelStatus.NEEDS_CORRECTION:
        return LabelStatus.REJECTED
    if stored_status == LabelStatus.CONDITIONALLY_APPROVED:
        return LabelStatus.NEEDS_CORRECTION
    return stored_status


def resolve_effective_status(
    label_id: str,
    stored_status: LabelStatus,
    correction_deadline: Optional[datetime],
    writer: Optional[StatusWriter] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> LabelStatus:
    """
    Effective status for a read path, converging storage in the background.

    When the effective status differs and a writer is given, the new
    status is written back without waiting. The returned value never
    depends on that write. A lapse to needs_correction is stored with a
    fresh correction deadline and a lapse to rejected with none, so the
    stored record reads back as the same status.
    """
    now = _as_utc(now or utc_now())
    status = effective_status(stored_status, correction_deadline, now)
    if status != stored_status and writer is not None:
        settings = settings or get_settings()
        new_deadline = None
        if status == LabelStatus.NEEDS_CORRECTION:
            new_deadline = now + timedelta(days=settings.correction_deadline_days)
        logger.info(f"Label {label_id} deadline lapsed: {stored_status.value} -> {status.value}")
        fire_and_forget(
            writer.write_status,
            label_id,
            status,
            new_deadline,
            description=f"status write-back for label {label_id}",
        )
    return status


def deadline_info(
    correction_deadline: Optional[datetime],
    now: Optional[datetime] = None,
) -> Optional[DeadlineInfo]:
    """
    Days left on a correction deadline and how urgent it is.

    - green: more than 7 days
    - amber: 1-7 days
    - red: under 24 hours
    - expired: deadline has passed
    """
    if correction_deadline is None:
        return None

    now = _as_utc(now or utc_now())
    remaining = _as_utc(correction_deadline) - now
    seconds = remaining.total_seconds()

    if seconds <= 0:
        return DeadlineInfo(days_remaining=0, urgency=Urgency.EXPIRED)

    days = math.ceil(seconds / 86400)
    if seconds < 86400:
        urgency = Urgency.RED
    elif days <= 7:
        urgency = Urgency.AMBER
    else:
        urgency = Urgency.GREEN
    return DeadlineInfo(days_remaining=days, urgency=urgency)
