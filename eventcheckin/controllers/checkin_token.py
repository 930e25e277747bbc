from __future__ import annotations

import json
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventcheckin.controllers.event import get_event, lock_active_event
from eventcheckin.core.errors import (
    ActiveTokenNotFound,
    EventUnavailable,
    MalformedToken,
    TokenInactiveOrUnknown,
)
from eventcheckin.models.checkin_token import CheckInToken, generate_token_id
from eventcheckin.models.event import Event
from eventcheckin.models.user import User
from eventcheckin.schemas.attendance import MAX_EVENT_ID, CheckInTokenOut, TokenHistoryItem, ValidatedToken
from eventcheckin.utils.logging_decorator import log_create, log_update
from eventcheckin.utils.timestamps import ensure_utc, to_iso_format, utc_now

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "attendance_verification"

# A concurrent issuer can trip the one-active-token index; retry the whole unit
ISSUE_ATTEMPTS = 3


def build_payload(event: Event, token_id: str, issued_at) -> dict:
    return {
        "type": PAYLOAD_TYPE,
        "event_id": event.id,
        "event_title": event.title,
        "token_id": token_id,
        "issued_at": to_iso_format(issued_at),
    }


@log_create("checkin_tokens", "Issued event check-in code")
def issue_token(db: Session, event_id: int, user: User) -> CheckInToken:
    """
    Issue a fresh check-in token for an active event.

    Retiring the previous active token and inserting the new one happen in
    one transaction, under a row lock on the event, so only the token of the
    last committed call stays active.
    """
    for attempt in range(1, ISSUE_ATTEMPTS + 1):
        try:
            event = lock_active_event(db, event_id)

            retired = (
                db.query(CheckInToken)
                .filter(CheckInToken.event_id == event.id, CheckInToken.active.is_(True))
                .update({CheckInToken.active: False, CheckInToken.deactivated_at: utc_now()}, synchronize_session=False)
            )
            # Taken once the write lock is held so issue order matches commit order
            now = utc_now()

            token_id = generate_token_id()
            token = CheckInToken(
                id=token_id,
                event_id=event.id,
                payload=build_payload(event, token_id, now),
                active=True,
                issued_by=user.id,
                issued_at=now,
            )
            db.add(token)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Concurrent issuance for event {event_id} (attempt {attempt}): {e.orig}")
            continue
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to issue check-in code for event {event_id}")
            raise
        except Exception:
            db.rollback()
            raise

        db.refresh(token)
        logger.info(f"Issued check-in code for event {event_id} by user {user.id}, retired {retired} previous")
        return token

    raise RuntimeError(f"Unable to issue check-in code for event {event_id}")


def get_active_token(db: Session, event_id: int) -> CheckInToken:
    get_event(db, event_id)
    token = (
        db.query(CheckInToken)
        .filter(CheckInToken.event_id == event_id, CheckInToken.active.is_(True))
        .order_by(CheckInToken.issued_at.desc())
        .first()
    )
    if not token:
        raise ActiveTokenNotFound()
    return token


def has_active_token(db: Session, event_id: int) -> bool:
    get_event(db, event_id)
    return db.query(
        db.query(CheckInToken)
        .filter(CheckInToken.event_id == event_id, CheckInToken.active.is_(True))
        .exists()
    ).scalar()


@log_update("checkin_tokens", "Deactivated event check-in code")
def deactivate_token(db: Session, event_id: int, user: User) -> bool:
    """Retire the active token of an event. Returns False when there was none."""
    get_event(db, event_id)
    try:
        retired = (
            db.query(CheckInToken)
            .filter(CheckInToken.event_id == event_id, CheckInToken.active.is_(True))
            .update({CheckInToken.active: False, CheckInToken.deactivated_at: utc_now()}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to deactivate check-in code for event {event_id}")
        raise

    if retired:
        logger.info(f"Deactivated check-in code for event {event_id} by user {user.id}")
    return retired > 0


def list_token_history(db: Session, event_id: int) -> list[TokenHistoryItem]:
    get_event(db, event_id)
    rows = (
        db.query(CheckInToken, User.full_name)
        .outerjoin(User, User.id == CheckInToken.issued_by)
        .filter(CheckInToken.event_id == event_id)
        .order_by(CheckInToken.issued_at.desc())
        .all()
    )
    return [
        TokenHistoryItem(
            **token_to_out(token).model_dump(),
            issued_by_name=issuer_name,
            deactivated_at=ensure_utc(token.deactivated_at),
        )
        for token, issuer_name in rows
    ]


def token_to_out(token: CheckInToken) -> CheckInTokenOut:
    return CheckInTokenOut(
        token_id=token.id,
        event_id=token.event_id,
        active=token.active,
        issued_by=token.issued_by,
        issued_at=ensure_utc(token.issued_at),
        payload=token.payload,
    )


def parse_scanned_payload(raw_payload: Optional[str]) -> tuple[int, str]:
    """Extract (event_id, token_id) from the text read out of a QR image."""
    try:
        data = json.loads(raw_payload)
    except (TypeError, ValueError):
        raise MalformedToken()

    if not isinstance(data, dict):
        raise MalformedToken()

    event_id = data.get("event_id")
    token_id = data.get("token_id")
    if not isinstance(token_id, str) or not token_id:
        raise MalformedToken()

    # bool is an int subclass; ids past the BIGINT range never reach the store
    if isinstance(event_id, bool) or not isinstance(event_id, int) or not 1 <= event_id <= MAX_EVENT_ID:
        raise MalformedToken()

    return event_id, token_id


def validate_scan(db: Session, raw_payload: Optional[str]) -> ValidatedToken:
    """Resolve scanned text to an active token of an active event. Read-only."""
    event_id, token_id = parse_scanned_payload(raw_payload)

    token = (
        db.query(CheckInToken)
        .filter(
            CheckInToken.id == token_id,
            CheckInToken.event_id == event_id,
            CheckInToken.active.is_(True),
        )
        .first()
    )
    if not token:
        raise TokenInactiveOrUnknown()

    event = db.query(Event).filter(Event.id == event_id).first()
    if not event or not event.is_active:
        raise EventUnavailable()

    return ValidatedToken(
        event_id=event.id,
        token_id=token.id,
        event_title=event.title,
        event_scheduled_at=ensure_utc(event.scheduled_at),
    )
