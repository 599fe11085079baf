import logging
from sqlmodel import Session

from storefront.configuration.settings import Configuration
from storefront.database.connection import create_tables, engine
from storefront.database.populate import populate_database

configuration = Configuration()


def init_db():
    """Creates the tables and seeds the catalog when configured to."""
    create_tables()
    logging.info("DATABASE >>> Tables created")

    if configuration.populate_database:
        with Session(engine) as session:
            populate_database(session)
