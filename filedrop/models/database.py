# filedrop/models/database.py
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def init_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # requests are served from a thread pool
        connect_args["check_same_thread"] = False

    engine = create_engine(database_url, connect_args=connect_args)

    # make sure the tables are registered before create_all
    from filedrop.models import file, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# DB session dependency, one per request from the app's own factory
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
