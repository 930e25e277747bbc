from sqlalchemy.orm import relationship

from .user import User
from .event import Event
from .inscription import Inscription
from .checkin_token import CheckInToken
from .attendance_verification import AttendanceVerification
from .system_log import SystemLog

Event.checkin_tokens = relationship("CheckInToken", back_populates="event", passive_deletes=True)
CheckInToken.event = relationship("Event", back_populates="checkin_tokens")
CheckInToken.issuer = relationship("User")

Event.verifications = relationship("AttendanceVerification", back_populates="event", passive_deletes=True)
AttendanceVerification.event = relationship("Event", back_populates="verifications")
AttendanceVerification.user = relationship("User")
AttendanceVerification.token = relationship("CheckInToken")

Inscription.user = relationship("User")
Inscription.event = relationship("Event")
