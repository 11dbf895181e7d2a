from __future__ import annotations

from pydantic import BaseModel, Field


class SessionInfo(BaseModel):
    user_id: str = Field(..., alias="userId")
    username: str
    token: str

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "userId": "5b0d1c3e8f7a4b2c9d6e1f0a2b3c4d5e",
                "username": "ada",
                "token": "<opaque live-channel token>",
            }
        },
    }
