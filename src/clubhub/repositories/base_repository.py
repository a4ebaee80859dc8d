from sqlalchemy.orm import Session


class BaseRepository:
    """Base repository class holding the request-scoped database session."""

    def __init__(self, db: Session):
        self.db = db

    def _commit_and_refresh(self, instance):
        self.db.commit()
        self.db.refresh(instance)
        return instance
