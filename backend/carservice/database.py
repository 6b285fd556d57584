from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .models.tables import ServiceBays


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    For SQLite the pysqlite implicit transaction handling is disabled and
    BEGIN is emitted explicitly, so a session can ask for
    BEGIN IMMEDIATE (write lock up front) through the ``sqlite_begin``
    execution option.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    # check_same_thread=False: required for SQLite used from FastAPI threads
    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        # WAL: open read transactions do not block the ledger writer's commit
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


engine = build_engine(settings.resolved_database_url)

# expire_on_commit=False: created bookings are returned to the caller after commit
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


# Dependencies for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    return SessionLocal


class UnitOfWork:
    """
    One write transaction over the booking ledger.

    Usage:
        with UnitOfWork(SessionLocal) as db:
            ...

    Commits when the block exits normally, rolls back on any exception and
    always closes the session. The ledger lock is taken on entry, so every
    read inside the block sees a view no concurrent writer can change.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> Session:
        self.session = self._session_factory()
        try:
            lock_booking_ledger(self.session)
        except BaseException:
            self.session.close()
            self.session = None
            raise
        return self.session

    def __exit__(self, exc_type, exc, tb) -> bool:
        session = self.session
        self.session = None
        try:
            if exc_type is None:
                session.commit()
            else:
                session.rollback()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()
        return False


def lock_booking_ledger(db: Session) -> None:
    """
    Serialize ledger writers.

    SQLite: the transaction starts with BEGIN IMMEDIATE, which takes the
    database write lock before the first read.
    Other dialects: SELECT ... FOR UPDATE on the active bay rows; every
    writer locks the same rows, so check-then-insert runs one at a time.
    """
    if db.get_bind().dialect.name == "sqlite":
        db.connection(execution_options={"sqlite_begin": "IMMEDIATE"})
        return

    db.execute(
        select(ServiceBays.id)
        .where(ServiceBays.is_active == 1)
        .order_by(ServiceBays.id)
        .with_for_update()
    ).all()
