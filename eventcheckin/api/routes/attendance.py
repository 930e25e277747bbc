from io import BytesIO

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from eventcheckin.core.permissions import require_organizer_or_admin
from eventcheckin.core.security import get_current_user
from eventcheckin.db.session import get_db
from eventcheckin.models.user import User
from eventcheckin.schemas.attendance import (
    MAX_EVENT_ID,
    AttendanceStatsOut,
    CanEvaluateOut,
    CheckInTokenWithImage,
    DeactivateTokenOut,
    EventVerificationItem,
    IssueTokenRequest,
    ScanRequest,
    ScanResultOut,
    TokenHistoryItem,
    UserVerificationItem,
    ValidatedToken,
)
from eventcheckin.services.qr_service import render_scannable, render_scannable_data_url
import eventcheckin.controllers.attendance_verification as crud_verification
import eventcheckin.controllers.checkin_token as crud_token


router = APIRouter(tags=["Attendance"])


def _with_image(token) -> CheckInTokenWithImage:
    out = crud_token.token_to_out(token)
    return CheckInTokenWithImage(**out.model_dump(), scannable_image=render_scannable_data_url(out.payload))


# ORGANIZER ROUTES

@router.post("/generate-qr", response_model=CheckInTokenWithImage, status_code=status.HTTP_201_CREATED)
def generate_qr(
        data: IssueTokenRequest,
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    token = crud_token.issue_token(db, data.event_id, current_user)
    return _with_image(token)


@router.get("/event/{event_id}/qr", response_model=CheckInTokenWithImage)
def get_active_qr(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    return _with_image(crud_token.get_active_token(db, event_id))


@router.get("/event/{event_id}/qr/status")
def get_qr_status(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    return {"event_id": event_id, "has_active_qr": crud_token.has_active_token(db, event_id)}


@router.get("/event/{event_id}/qr.png")
def get_active_qr_png(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    token = crud_token.get_active_token(db, event_id)
    return StreamingResponse(
        BytesIO(render_scannable(token.payload)),
        media_type="image/png",
        headers={"Cache-Control": "no-store"},
    )


@router.delete("/event/{event_id}/qr", response_model=DeactivateTokenOut)
def deactivate_qr(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    return DeactivateTokenOut(deactivated=crud_token.deactivate_token(db, event_id, current_user))


@router.get("/event/{event_id}/qr-history", response_model=list[TokenHistoryItem])
def get_qr_history(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    return crud_token.list_token_history(db, event_id)


@router.get("/event/{event_id}/verifications", response_model=list[EventVerificationItem])
def get_event_verifications(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    return crud_verification.list_verifications(db, event_id)


@router.get("/event/{event_id}/stats", response_model=AttendanceStatsOut)
def get_event_stats(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_organizer_or_admin),
):
    return crud_verification.compute_attendance_stats(db, event_id)


# ATTENDEE ROUTES

@router.post("/validate", response_model=ValidatedToken)
def validate_qr(
        data: ScanRequest,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    return crud_token.validate_scan(db, data.qr_data)


@router.post("/verify", response_model=ScanResultOut, status_code=status.HTTP_201_CREATED)
def verify_attendance(
        data: ScanRequest,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    validated = crud_token.validate_scan(db, data.qr_data)
    verification = crud_verification.record_verification(db, validated, current_user)
    return ScanResultOut(
        **crud_verification.verification_to_out(verification).model_dump(),
        event={
            "id": validated.event_id,
            "title": validated.event_title,
            "scheduled_at": validated.event_scheduled_at,
        },
    )


@router.get("/can-evaluate/{event_id}", response_model=CanEvaluateOut)
def can_evaluate(
        event_id: int = Path(..., ge=1, le=MAX_EVENT_ID),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    return crud_verification.can_evaluate(db, current_user.id, event_id)


@router.get("/user/verifications", response_model=list[UserVerificationItem])
def get_user_verifications(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    return crud_verification.list_user_verifications(db, current_user.id)
