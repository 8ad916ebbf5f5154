"""User projections.

None of these carry the password hash; it never leaves the users table
except through ``UserService.authenticate``.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Full profile of a registered user."""

    username: str
    first_name: str
    last_name: str
    phone: str
    join_at: datetime
    last_login_at: Optional[datetime] = None


class UserRef(BaseModel):
    """Participant projection embedded in messages."""

    username: str
    first_name: str
    last_name: str
    phone: str


class UserSummary(BaseModel):
    """Narrow projection used by the user listing."""

    username: str
    first_name: str
    last_name: str
