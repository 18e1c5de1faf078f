"""User profile model."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserSettings(BaseModel):
    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    notifications: bool = True
    theme: str = "auto"


class User(BaseModel):
    """Profile stored at `users/{uid}`."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True, populate_by_name=True)

    uid: str
    email: str = ""
    display_name: str = Field("", alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    is_public: bool = Field(False, alias="isPublic")
    settings: UserSettings = Field(default_factory=UserSettings)
    favorite_teams: List[int] = Field(default_factory=list, alias="favoriteTeams")
    fcm_tokens: List[str] = Field(default_factory=list, alias="fcmTokens")
    notification_preferences: Dict[str, Any] = Field(
        default_factory=dict, alias="notificationPreferences"
    )

    def to_document(self) -> Dict[str, Any]:
        """Firestore document shape (camelCase keys)."""
        return self.model_dump(by_alias=True, exclude_none=True)
