# barbershop/db.py

from sqlmodel import SQLModel, create_engine, Session

from barbershop.config import DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # required for SQLite + FastAPI
    connect_args["check_same_thread"] = False

engine = create_engine(
    DATABASE_URL,
    echo=False,
    connect_args=connect_args,
)


def init_db(bind=None):
    # tables must be registered on the metadata before create_all
    from barbershop import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
