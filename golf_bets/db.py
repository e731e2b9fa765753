import logging
import os

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# obligatoria: sin valor por defecto para no escribir en una base equivocada
DATABASE_URL = os.environ["DATABASE_URL"]
SQL_ECHO = os.environ.get("SQL_ECHO", "").lower() in ("1", "true", "yes")


def _connect_args(url: str) -> dict:
    # SQLite comparte conexión entre los hilos del servidor (y del TestClient)
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    pool_pre_ping=True,
    echo=SQL_ECHO,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> list[str]:
    """Crea las tablas que falten y devuelve las existentes."""
    from . import models  # noqa: F401  registra las tablas en Base

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    tables = sorted(inspect(bind).get_table_names())
    logger.info("Base de datos lista (%s tablas)", len(tables))
    return tables


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
