from functools import wraps
from typing import Optional, Callable, Any
from sqlalchemy.orm import Session
from eventcheckin.models.user import User
from eventcheckin.services.logging_service import LoggingService
import logging

# Audit decorators for controller functions. The audit row is written only
# after the wrapped call returns; a failing audit write never hides the result.

logger = logging.getLogger(__name__)


def log_activity(
    action: str,
    description: Optional[Any] = None,
    table_name: Optional[str] = None,
    get_record_id: Optional[Callable] = None,
    get_details: Optional[Callable] = None,
    skip_if_false: bool = False,
):
    """
    Decorator to write an audit entry for a controller function

    The wrapped function must receive the database session and the acting
    user, positionally or as ``db`` / ``user`` keyword arguments.

    Args:
        action: Action type (CREATE, UPDATE, VIEW, ...)
        description: Fixed description or callable(result, *args, **kwargs)
        table_name: Table affected
        get_record_id: Function to extract record ID from the result
        get_details: Function to extract additional details
        skip_if_false: Write nothing when the call returns False (no-op update)
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            result = func(*args, **kwargs)

            db = kwargs.get('db')
            user = kwargs.get('user')
            for arg in args:
                if db is None and isinstance(arg, Session):
                    db = arg
                elif user is None and isinstance(arg, User):
                    user = arg

            if db is None or user is None:
                return result
            if skip_if_false and result is False:
                return result

            try:
                final_description = description
                if callable(description):
                    final_description = description(result, *args, **kwargs)

                record_id = get_record_id(result, *args, **kwargs) if get_record_id else None
                details = get_details(result, *args, **kwargs) if get_details else None

                LoggingService.log_activity(
                    db=db,
                    user=user,
                    action=action,
                    description=final_description or f"Performed {action.lower()} action",
                    table_name=table_name,
                    record_id=record_id,
                    details=details,
                )
            except Exception as e:
                db.rollback()
                logger.error(f"Failed to log activity for {func.__name__}: {e}")

            return result

        return wrapper

    return decorator


def extract_id_from_result(result, *args, **kwargs):
    """Extract ID from function result"""
    if hasattr(result, 'id'):
        return result.id
    elif isinstance(result, dict) and 'id' in result:
        return result['id']
    return None


def extract_event_id(result, *args, **kwargs):
    event_id = getattr(result, 'event_id', None)
    return {"event_id": event_id} if event_id is not None else None


def log_create(table_name: str, description: Optional[str] = None):
    """
    Decorator for CREATE operations

    Usage:
        @log_create("checkin_tokens", "Issued check-in code")
        def issue_token(db, event_id, user):
            return token
    """
    return log_activity(
        action="CREATE",
        description=description or LoggingService.get_action_description("CREATE", table_name),
        table_name=table_name,
        get_record_id=extract_id_from_result,
        get_details=extract_event_id,
    )


def log_update(table_name: str, description: Optional[str] = None):
    """Decorator for UPDATE operations"""
    return log_activity(
        action="UPDATE",
        description=description or LoggingService.get_action_description("UPDATE", table_name),
        table_name=table_name,
        get_record_id=extract_id_from_result,
        skip_if_false=True,
    )


def log_verify(table_name: str, description: Optional[str] = None):
    """Decorator for attendance verification"""
    return log_activity(
        action="VERIFY",
        description=description or LoggingService.get_action_description("VERIFY", table_name),
        table_name=table_name,
        get_record_id=extract_id_from_result,
        get_details=extract_event_id,
    )
