from pydantic import BaseModel, EmailStr, Field
from typing import List, Literal, Optional
from datetime import datetime
from app.schemas.common import CamelModel
from app.schemas.movie import LegacyWatchlistEntryResponse
from app.schemas.watchlist import WatchlistDetailResponse


class FriendInfo(BaseModel):
    id: str
    email: str
    display_name: str


class FriendRequestCreate(CamelModel):
    friend_email: Optional[EmailStr] = None


class FriendRequestRespond(BaseModel):
    status: Optional[str] = None


class FriendshipResponse(CamelModel):
    id: int
    user_email: str
    friend_email: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    direction: Literal["incoming", "outgoing"]
    friend: FriendInfo


class FriendshipActionResponse(BaseModel):
    success: bool = True
    message: str
    friendship: FriendshipResponse


class FriendWatchlistResponse(BaseModel):
    friend: FriendInfo
    watchlist: List[LegacyWatchlistEntryResponse] = Field(default_factory=list)
    watchlists: List[WatchlistDetailResponse] = Field(default_factory=list)
