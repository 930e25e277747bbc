from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from eventcheckin.schemas.user import UserSummary


# Largest id a signed 64-bit column can hold
MAX_EVENT_ID = 2**63 - 1


class IssueTokenRequest(BaseModel):
    event_id: int = Field(..., ge=1, le=MAX_EVENT_ID)


class CheckInTokenOut(BaseModel):
    token_id: str
    event_id: int
    active: bool
    issued_by: int
    issued_at: datetime
    payload: dict


class CheckInTokenWithImage(CheckInTokenOut):
    scannable_image: str


class TokenHistoryItem(CheckInTokenOut):
    issued_by_name: Optional[str] = None
    deactivated_at: Optional[datetime] = None


class DeactivateTokenOut(BaseModel):
    deactivated: bool


class ScanRequest(BaseModel):
    qr_data: str = Field(..., min_length=1, description="Raw text decoded from the scanned image")


class ValidatedToken(BaseModel):
    event_id: int
    token_id: str
    event_title: str
    event_scheduled_at: datetime


class EventSummary(BaseModel):
    id: int
    title: str
    scheduled_at: datetime


class VerificationOut(BaseModel):
    verification_id: int
    event_id: int
    token_id: str
    verified_at: datetime


class ScanResultOut(VerificationOut):
    event: EventSummary


class EventVerificationItem(VerificationOut):
    attendee: UserSummary
    token_issued_at: Optional[datetime] = None


class UserVerificationItem(VerificationOut):
    event: EventSummary


class AttendanceStatsOut(BaseModel):
    event_id: int
    inscribed_count: int
    verified_count: int
    attendance_rate: float
    attendance_percentage: float


class CanEvaluateOut(BaseModel):
    can_evaluate: bool
    event: EventSummary
