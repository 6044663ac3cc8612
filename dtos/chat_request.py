from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

ANONYMOUS_USER = "anonymous"


class ChatRequest(BaseModel):
    # Optional so that a missing message is answered with 400 rather than a schema error
    message: Optional[str] = Field(default=None, description="The user's message")
    user_id: Optional[str] = Field(default=None, alias="userId", description="Opaque user identifier")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def resolved_user_id(self) -> str:
        return self.user_id or ANONYMOUS_USER
