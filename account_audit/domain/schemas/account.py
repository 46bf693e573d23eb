"""Pydantic schemas for the account-info read boundary. No DB or infrastructure."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class AccountInfo(BaseModel):
    """Account info response. Every field is required; serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    email: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    roles: List[str]
    register_time: str = Field(..., alias="registerTime")
    last_login_time: str = Field(..., alias="lastLoginTime")
    ip_address: str = Field(..., alias="ipAddress")
    user_agent: str = Field(..., alias="userAgent")
    status: str

    def to_map(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
