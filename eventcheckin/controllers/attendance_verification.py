from __future__ import annotations

import logging

from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventcheckin.controllers.event import get_event
from eventcheckin.controllers.inscription import count_inscriptions, is_inscribed
from eventcheckin.core.errors import AlreadyVerified, NotInscribed, TokenInactiveOrUnknown
from eventcheckin.models.attendance_verification import AttendanceVerification
from eventcheckin.models.checkin_token import CheckInToken
from eventcheckin.models.event import Event
from eventcheckin.models.inscription import Inscription
from eventcheckin.models.user import User
from eventcheckin.schemas.attendance import (
    AttendanceStatsOut,
    CanEvaluateOut,
    EventSummary,
    EventVerificationItem,
    UserVerificationItem,
    ValidatedToken,
    VerificationOut,
)
from eventcheckin.schemas.user import UserSummary
from eventcheckin.utils.logging_decorator import log_verify
from eventcheckin.utils.timestamps import ensure_utc

logger = logging.getLogger(__name__)


@log_verify("attendance_verifications", "Verified event attendance")
def record_verification(db: Session, validated: ValidatedToken, user: User) -> AttendanceVerification:
    """
    Record that a user redeemed a validated check-in token.

    The existence check only saves a round trip; the unique index on
    (event_id, user_id) decides which of two concurrent scans wins.
    """
    if not is_inscribed(db, user.id, validated.event_id):
        raise NotInscribed()

    if has_verified_attendance(db, user.id, validated.event_id):
        raise AlreadyVerified()

    # The code may have been retired since the scan was validated; the shared
    # lock holds off a concurrent retire until this insert commits
    token = (
        db.query(CheckInToken)
        .filter(
            CheckInToken.id == validated.token_id,
            CheckInToken.event_id == validated.event_id,
            CheckInToken.active.is_(True),
        )
        .with_for_update(read=True)
        .first()
    )
    if token is None:
        raise TokenInactiveOrUnknown()

    verification = AttendanceVerification(
        event_id=validated.event_id,
        user_id=user.id,
        token_id=validated.token_id,
    )
    db.add(verification)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if has_verified_attendance(db, user.id, validated.event_id):
            logger.info(f"Lost verification race for user {user.id} at event {validated.event_id}")
            raise AlreadyVerified() from e
        logger.exception(f"Integrity failure verifying user {user.id} at event {validated.event_id}")
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to verify user {user.id} at event {validated.event_id}")
        raise

    db.refresh(verification)
    logger.info(f"Verified attendance of user {user.id} at event {validated.event_id}")
    return verification


def has_verified_attendance(db: Session, user_id: int, event_id: int) -> bool:
    return db.query(
        db.query(AttendanceVerification)
        .filter(AttendanceVerification.user_id == user_id, AttendanceVerification.event_id == event_id)
        .exists()
    ).scalar()


def can_evaluate(db: Session, user_id: int, event_id: int) -> CanEvaluateOut:
    event = get_event(db, event_id)
    return CanEvaluateOut(
        can_evaluate=has_verified_attendance(db, user_id, event_id),
        event=event_summary(event),
    )


def list_verifications(db: Session, event_id: int) -> list[EventVerificationItem]:
    get_event(db, event_id)
    rows = (
        db.query(AttendanceVerification, User, CheckInToken.issued_at)
        .join(User, User.id == AttendanceVerification.user_id)
        .outerjoin(CheckInToken, CheckInToken.id == AttendanceVerification.token_id)
        .filter(AttendanceVerification.event_id == event_id)
        .order_by(AttendanceVerification.verified_at.desc())
        .all()
    )
    return [
        EventVerificationItem(
            **verification_to_out(verification).model_dump(),
            attendee=UserSummary.model_validate(user),
            token_issued_at=ensure_utc(token_issued_at),
        )
        for verification, user, token_issued_at in rows
    ]


def list_user_verifications(db: Session, user_id: int) -> list[UserVerificationItem]:
    rows = (
        db.query(AttendanceVerification, Event)
        .join(Event, Event.id == AttendanceVerification.event_id)
        .filter(AttendanceVerification.user_id == user_id)
        .order_by(AttendanceVerification.verified_at.desc())
        .all()
    )
    return [
        UserVerificationItem(**verification_to_out(verification).model_dump(), event=event_summary(event))
        for verification, event in rows
    ]


def compute_attendance_stats(db: Session, event_id: int) -> AttendanceStatsOut:
    get_event(db, event_id)
    inscribed_count = count_inscriptions(db, event_id)

    # Only verifications backed by an inscription count towards the rate
    verified_count = (
        db.query(func.count(AttendanceVerification.id))
        .join(
            Inscription,
            and_(
                Inscription.user_id == AttendanceVerification.user_id,
                Inscription.event_id == AttendanceVerification.event_id,
            ),
        )
        .filter(AttendanceVerification.event_id == event_id)
        .scalar()
    ) or 0

    attendance_rate = verified_count / inscribed_count if inscribed_count else 0.0

    return AttendanceStatsOut(
        event_id=event_id,
        inscribed_count=inscribed_count,
        verified_count=verified_count,
        attendance_rate=attendance_rate,
        attendance_percentage=round(attendance_rate * 100, 2),
    )


def verification_to_out(verification: AttendanceVerification) -> VerificationOut:
    return VerificationOut(
        verification_id=verification.id,
        event_id=verification.event_id,
        token_id=verification.token_id,
        verified_at=ensure_utc(verification.verified_at),
    )


def event_summary(event: Event) -> EventSummary:
    return EventSummary(id=event.id, title=event.title, scheduled_at=ensure_utc(event.scheduled_at))
