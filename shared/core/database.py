from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from shared.core.config import LEASING_DATABASE_URL

Base = declarative_base()

POOL_SIZE = 2
MAX_OVERFLOW = 2


def engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": POOL_SIZE,          # max idle connections
        "max_overflow": MAX_OVERFLOW,    # max temporary extra connections
        "pool_timeout": 30,              # wait time before failing
    }


# Leasing DB
leasing_engine = create_engine(
    LEASING_DATABASE_URL, **engine_options(LEASING_DATABASE_URL))
LeasingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=leasing_engine)


# Dependency
def get_leasing_db():
    db = LeasingSessionLocal()
    try:
        yield db
    finally:
        db.close()
