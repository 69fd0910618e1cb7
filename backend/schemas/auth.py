from datetime import datetime
from typing import Literal, Optional

from schemas.common import ApiModel, SessionOut

RoleName = Literal["chief", "admin", "college", "normal"]
AdminStatus = Literal["active", "inactive"]


class LoginInput(ApiModel):
    username: str
    password: str


class AdminOut(ApiModel):
    id: int
    username: str
    role: RoleName
    college_code: Optional[str] = None
    status: AdminStatus
    created_at: datetime


class AuthResponse(ApiModel):
    success: bool
    message: str
    user: Optional[AdminOut] = None
    session_token: Optional[str] = None
    session: Optional[SessionOut] = None


class MeResponse(ApiModel):
    authenticated: bool
    user: Optional[AdminOut] = None


class AdminCreateInput(ApiModel):
    username: str
    password: str
    role: RoleName
    college_code: Optional[str] = None


class AdminUpdateInput(ApiModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[RoleName] = None
    college_code: Optional[str] = None


class AdminStatusInput(ApiModel):
    status: AdminStatus
