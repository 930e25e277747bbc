from sqlalchemy import Column, Integer, String, Enum, DateTime
from sqlalchemy.sql import func

from eventcheckin.db.session import Base
from eventcheckin.schemas.user import RoleEnum


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.participant)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
