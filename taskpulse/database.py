import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from taskpulse.config.settings import settings

# SQLite connections are shared across the request threadpool;
# hosted PostgreSQL (Render or similar) wants sslmode=require
if settings.is_sqlite():
    connect_args = {"check_same_thread": False}
elif "sslmode" not in settings.DATABASE_URL:
    connect_args = {"sslmode": "require"}
else:
    connect_args = {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def generate_id() -> str:
    return str(uuid.uuid4())
