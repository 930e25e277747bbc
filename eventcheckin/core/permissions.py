from fastapi import HTTPException, Depends
from starlette import status

from eventcheckin.core.security import get_current_user
from eventcheckin.models.user import User
from eventcheckin.schemas.user import RoleEnum


def require_organizer_or_admin(current_user: User = Depends(get_current_user)) -> User:
    """Dependency restricting check-in code management to organizers and admins"""
    if current_user.role not in (RoleEnum.organizer, RoleEnum.admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Organizer or admin role required"
        )
    return current_user
