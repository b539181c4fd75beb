# database.py
"""
SQLAlchemy database connection and session management.

This module provides:
- Database engine configuration (Azure SQL / MS SQL Server, PostgreSQL or SQLite)
- Session factory for dependency injection
- UnitOfWork: the explicit transaction boundary used by the payment services

Usage:
     from database import get_session, engine

     # In FastAPI routes:
     @app.get("/items")
     def get_items(db: Session = Depends(get_session)):
          return db.query(Item).all()
     """
from contextlib import contextmanager
from typing import Callable, Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import DATABASE_URL, SQL_ECHO, logger


def build_engine(url: str = DATABASE_URL, echo: bool = SQL_ECHO) -> Engine:
     """Create an engine; SQLite needs cross-thread access for the FastAPI threadpool."""
     if url.startswith("sqlite"):
          return create_engine(
               url,
               connect_args={"check_same_thread": False},
               echo=echo,
          )
     return create_engine(
          url,
          pool_size=5,
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          echo=echo,
     )


def build_session_factory(bind: Engine) -> sessionmaker:
     return sessionmaker(
          bind=bind,
          autocommit=False,
          autoflush=False,
          expire_on_commit=False,
     )


# Create SQLAlchemy engine
engine = build_engine()

# Session factory
SessionLocal = build_session_factory(engine)


def get_session() -> Generator[Session, None, None]:
     """
     FastAPI dependency that provides a database session.

     Yields:
          Session: SQLAlchemy database session
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
     """
     Context manager for database sessions (for use outside FastAPI routes).

     Usage:
          with get_session_context() as db:
               wallets = db.query(Wallet).all()
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


class UnitOfWork:
     """
     Explicit transaction boundary.

     Every write the payment services make happens inside ``transaction()``:
     the block commits as a whole or is rolled back as a whole. Repositories
     never commit on their own.
     """

     def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
          self._session_factory = session_factory

     @contextmanager
     def transaction(self) -> Generator[Session, None, None]:
          session = self._session_factory()
          try:
               yield session
               session.commit()
          except Exception:
               session.rollback()
               raise
          finally:
               session.close()

     @contextmanager
     def read(self) -> Generator[Session, None, None]:
          """Read-only session; nothing is committed."""
          session = self._session_factory()
          try:
               yield session
          finally:
               session.rollback()
               session.close()


def init_db(bind: Engine = engine) -> None:
     """
     Initialize database tables.

     Creates all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from models import Base
     Base.metadata.create_all(bind=bind)


def check_connection(bind: Engine = engine) -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          with bind.connect() as conn:
               conn.execute(text("SELECT 1"))
          return True
     except Exception as e:
          logger.error(f"Database connection failed: {e}")
          return False
