from sqlalchemy.orm import sessionmaker

from api.src.config import get_settings
from runner.src.models.db import Base
from runner.src.services.status_reporter import build_engine

settings = get_settings()

engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)

def get_db():
    with SessionLocal() as session:
        yield session

def init_db():
    Base.metadata.create_all(engine)
