from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from app.db import Base


class FavoriteActor(Base):
    __tablename__ = "favorite_actors"
    __table_args__ = (
        UniqueConstraint("user_email", "actor_id", name="uq_favorite_actor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String, nullable=False, index=True)
    actor_id = Column(Integer, nullable=False)
    actor_name = Column(String, nullable=False)
    profile_path = Column(String, nullable=True)
    known_for_department = Column(String, nullable=True)
    popularity = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
