from sqlalchemy import func
from sqlalchemy.orm import Session

from eventcheckin.models.inscription import Inscription


def is_inscribed(db: Session, user_id: int, event_id: int) -> bool:
    return db.query(
        db.query(Inscription)
        .filter(Inscription.user_id == user_id, Inscription.event_id == event_id)
        .exists()
    ).scalar()


def count_inscriptions(db: Session, event_id: int) -> int:
    return db.query(func.count(Inscription.id)).filter(Inscription.event_id == event_id).scalar() or 0
