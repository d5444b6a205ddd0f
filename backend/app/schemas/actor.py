from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class FavoriteActorCreate(BaseModel):
    id: int = Field(..., gt=0, description="TMDB person ID")
    name: str = Field(..., min_length=1)
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None
    popularity: Optional[float] = None


class FavoriteActorResponse(BaseModel):
    id: int
    actor_id: int
    name: str = Field(validation_alias="actor_name")
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None
    popularity: Optional[float] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True
