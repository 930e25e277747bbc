from sqlalchemy.orm import Session
from typing import Optional, Dict, Any
from eventcheckin.models.system_log import SystemLog
from eventcheckin.models.user import User


class LoggingService:
    """Service for recording audit entries of check-in activity"""

    @staticmethod
    def log_activity(
        db: Session,
        user: User,
        action: str,
        description: str,
        table_name: Optional[str] = None,
        record_id: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> SystemLog:
        """
        Persist an audit entry

        Args:
            db: Database session
            user: User who performed the action
            action: Action type (CREATE, UPDATE, VIEW, ...)
            description: Human-readable description of the action
            table_name: Name of the table affected
            record_id: ID of the record affected
            details: Additional context as dictionary
            ip_address: IP address of the user
            user_agent: User agent string
        """
        log_entry = SystemLog(
            user_id=user.id,
            user_name=user.full_name,
            user_role=user.role.value if user.role else None,
            action=action.upper(),
            description=description,
            table_name=table_name,
            record_id=str(record_id) if record_id is not None else None,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent
        )

        db.add(log_entry)
        db.commit()
        db.refresh(log_entry)

        return log_entry

    @staticmethod
    def get_action_description(action: str, table_name: str) -> str:
        descriptions = {
            "CREATE": f"Created new {table_name}",
            "UPDATE": f"Updated {table_name}",
            "VIEW": f"Viewed {table_name}",
            "VERIFY": f"Verified {table_name}",
        }
        return descriptions.get(action.upper(), f"Performed {action.lower()} on {table_name}")

