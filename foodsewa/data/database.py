# foodsewa/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from foodsewa.utils.settings import DATABASE_URL


class Base(DeclarativeBase):
    pass


def _engine_for(url: str):
    if url.startswith("sqlite"):
        #in-memory sqlite has to share one connection between threads (TestClient)
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_pre_ping=True)


engine = _engine_for(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
