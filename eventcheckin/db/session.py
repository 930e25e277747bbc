from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from eventcheckin.core.config import settings

# SQLite needs cross-thread access since request handlers run in a thread pool
connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a DB session and close it after use."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
