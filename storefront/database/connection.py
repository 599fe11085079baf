from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront.configuration.settings import Configuration

configuration = Configuration()


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(database_url, connect_args=connect_args)
    return create_engine(database_url, pool_pre_ping=True)


engine = build_engine(configuration.connect_to_database())


def get_session():
    with Session(engine) as session:
        yield session


def create_tables(bind=None):
    # Models must be imported so their tables are registered on the metadata
    import storefront.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
