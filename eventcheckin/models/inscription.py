from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint

from eventcheckin.db.session import Base
from eventcheckin.utils.timestamps import utc_now


class Inscription(Base):
    __tablename__ = "inscriptions"
    __table_args__ = (UniqueConstraint('user_id', 'event_id', name='uq_inscription_user_event'),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
