from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

def make_engine(database_url: str):
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        # check_same_thread=False is needed only for SQLite
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, connect_args=connect_args, **kwargs)

def create_db_and_tables(engine):
    SQLModel.metadata.create_all(engine)
