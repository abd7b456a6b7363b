"""WebSocket chat message shapes (camelCase on the wire)"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bamboozled.database.helpers import utc_now


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IncomingMessage(_CamelModel):
    """Message sent by the chat client"""
    type: Literal["message", "command", "init"]
    content: str = ""
    user_id: Optional[str] = None
    user_name: Optional[str] = None


class ChatMetadata(_CamelModel):
    image_url: Optional[str] = None
    is_command: Optional[bool] = None
    mood_tier: Optional[int] = None
    error_type: Optional[str] = None
    achievements: Optional[List[Dict[str, Any]]] = None


class ChatMessage(_CamelModel):
    """Message sent to the chat client"""
    type: Literal["bot", "user", "error"] = "bot"
    content: str
    user_id: Optional[str] = None
    timestamp: str = Field(default_factory=utc_now)
    metadata: Optional[ChatMetadata] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
