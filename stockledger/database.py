from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from stockledger.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False
    connect_args["timeout"] = settings.SQLITE_BUSY_TIMEOUT_SECONDS

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, echo=settings.DATABASE_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models():
    # Import all models so Base.metadata knows about them
    import stockledger.models.catalog  # noqa: F401
    import stockledger.models.order  # noqa: F401
    import stockledger.models.realization  # noqa: F401
    import stockledger.models.receipt  # noqa: F401


def init_db(bind=None):
    import_models()
    Base.metadata.create_all(bind=bind or engine)
