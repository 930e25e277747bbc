import secrets

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Index, text

from eventcheckin.db.session import Base
from eventcheckin.utils.timestamps import utc_now


def generate_token_id() -> str:
    return secrets.token_urlsafe(32)


class CheckInToken(Base):
    __tablename__ = "checkin_tokens"
    __table_args__ = (
        # At most one active token per event, enforced by the store
        Index(
            "uq_checkin_tokens_active_event",
            "event_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active"),
        ),
    )

    id = Column(String(64), primary_key=True, default=generate_token_id)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    issued_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    issued_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    deactivated_at = Column(DateTime(timezone=True), nullable=True)
