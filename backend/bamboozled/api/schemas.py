"""Request bodies for the HTTP API (camelCase on the wire)"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bamboozled.models.guess import GUESS_MAX_LENGTH
from bamboozled.models.user import DISPLAY_NAME_MAX_LENGTH


class CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateUserRequest(CamelRequest):
    display_name: str = Field(..., min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH)
    slack_user_id: Optional[str] = None


class GuessRequest(CamelRequest):
    user_id: str = Field(..., min_length=1, description="ID of the user making the guess")
    guess_text: str = Field(..., min_length=1, max_length=GUESS_MAX_LENGTH, description="Answer guess")


class HintRequest(CamelRequest):
    user_id: str = Field(..., min_length=1)
    level: Optional[int] = Field(None, description="Hint level 1-3; next unused level when omitted")
