# database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from config import DATABASE_URL

# Request handlers and the Celery worker share one SQLite file across threads
connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# video_jobs and ad_templates hang off this metadata
Base = declarative_base()


def create_tables(bind=None):
    """Create every table registered on Base. Existing tables are left alone."""
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Per-request session, closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
