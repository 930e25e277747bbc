from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from eventcheckin.db.session import Base
from eventcheckin.utils.timestamps import utc_now


class AttendanceVerification(Base):
    __tablename__ = "attendance_verifications"
    __table_args__ = (UniqueConstraint('event_id', 'user_id', name='uq_attendance_verification_event_user'),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    token_id = Column(String(64), ForeignKey("checkin_tokens.id"), nullable=False)
    verified_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
