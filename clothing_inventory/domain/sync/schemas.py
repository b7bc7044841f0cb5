import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SyncState(str, enum.Enum):
    IDLE = "idle"
    PULLING_THEN_PUSHING = "pulling_then_pushing"
    SUBSCRIBED = "subscribed"


class AuthUser(BaseModel):
    uid: str
    email: Optional[str] = None
    id_token: str
    refresh_token: Optional[str] = None


class SignIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    uid: str
    email: Optional[str] = None


class NetworkUpdate(BaseModel):
    online: bool


class SyncStatus(BaseModel):
    state: SyncState
    online: bool
    authenticated: bool
    configured: bool
    last_sync: Optional[str] = None
    offline_changes: int = 0
    subscriptions: List[str] = []

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
