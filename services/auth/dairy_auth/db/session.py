from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase): pass


class Database:
    """Owns the engine and session factory for one application instance.

    Opened at startup and disposed at shutdown; request handlers receive
    sessions from it through ``api.deps.get_db``.
    """

    def __init__(self, dsn: str, echo: bool = False):
        connect_args = {'check_same_thread': False} if dsn.startswith('sqlite') else {}
        self.engine: Engine = create_engine(dsn, echo=echo, pool_pre_ping=True, connect_args=connect_args)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def create_all(self) -> None:
        from dairy_auth.db import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
