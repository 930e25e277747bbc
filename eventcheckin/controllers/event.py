from sqlalchemy.orm import Session

from eventcheckin.core.errors import EventNotFound
from eventcheckin.models.event import Event


def get_event(db: Session, event_id: int, *, include_inactive: bool = False) -> Event:
    """Look up an event; soft-deleted events count as missing unless asked for."""
    query = db.query(Event).filter(Event.id == event_id)
    if not include_inactive:
        query = query.filter(Event.is_active.is_(True))
    event = query.first()
    if not event:
        raise EventNotFound()
    return event


def lock_active_event(db: Session, event_id: int) -> Event:
    """Row-lock an active event for the rest of the transaction."""
    event = (
        db.query(Event)
        .filter(Event.id == event_id, Event.is_active.is_(True))
        .with_for_update()
        .first()
    )
    if not event:
        raise EventNotFound()
    return event
