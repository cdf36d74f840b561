from app.core.database import SessionLocal
from app.services.storage_service import LocalImageStorage

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_storage() -> LocalImageStorage:
    return LocalImageStorage.from_settings()
