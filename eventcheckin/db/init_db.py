import logging

from sqlalchemy.orm import Session

import eventcheckin.models  # noqa: F401  registers every table on Base.metadata
from eventcheckin.core.config import settings
from eventcheckin.core.security import get_password_hash
from eventcheckin.db.session import SessionLocal, Base, engine
from eventcheckin.models.user import User
from eventcheckin.schemas.user import RoleEnum

logger = logging.getLogger(__name__)


def init_db():
    Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal()
    try:
        admin = db.query(User).filter(User.email == settings.DEFAULT_ADMIN_EMAIL).first()
        if not admin:
            db.add(User(
                full_name="Admin User",
                email=settings.DEFAULT_ADMIN_EMAIL,
                hashed_password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
                role=RoleEnum.admin,
            ))
            db.commit()
            logger.info("Default admin user created.")
        else:
            logger.info("Admin user already exists.")
    finally:
        db.close()
