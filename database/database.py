import logging
from sqlmodel import SQLModel, create_engine
from config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL #SQLite database is stored in database.db unless DATABASE_URL says otherwise

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {} #FastAPI may run sync endpoints on different threads than the one that opened the connection
engine = create_engine(DATABASE_URL, connect_args=connect_args) #SQLAlchemy Engine allows for database interaction

def create_database_tables():
    import database.models  # noqa: F401 registers the table models on SQLModel.metadata
    SQLModel.metadata.create_all(engine) #creates SQLModel defined tables (that dont already exist) and adds to database
    logger.info("Database tables ready at %s", engine.url.render_as_string(hide_password=True))
