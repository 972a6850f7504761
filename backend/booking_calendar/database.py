from sqlalchemy import MetaData, create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from .config import settings

APP_ENV = settings.APP_ENV.lower()  # "dev" | "prod"

# nomi stabili per vincoli e indici
NAMING = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _connect_args(url: str) -> dict:
    # sqlite (dev/test) usa la stessa connessione da thread diversi
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def _make_engine(url: str = settings.DB_URL):
    # In sviluppo: nessun pool, ogni request apre e chiude la sua connessione
    if APP_ENV != "prod":
        return create_engine(
            url,
            future=True,
            pool_pre_ping=True,
            poolclass=NullPool,
            connect_args=_connect_args(url),
        )

    # In produzione: pool piccolo
    return create_engine(
        url,
        future=True,
        pool_pre_ping=True,
        pool_size=2,
        max_overflow=2,
        pool_recycle=1800,
        connect_args=_connect_args(url),
    )

engine = _make_engine()

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)

Base = declarative_base(metadata=MetaData(naming_convention=NAMING))


def create_tables(bind=None) -> None:
    from .models import availability, availability_settings, blocked_range, booking  # noqa: F401 (tabelle)
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
