from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class PerplexityMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChoiceMessage(BaseModel):
    role: str = "assistant"
    content: str = ""


class Choice(BaseModel):
    index: int = 0
    finish_reason: Optional[str] = None
    message: ChoiceMessage = Field(default_factory=ChoiceMessage)


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class PerplexityResponse(BaseModel):
    """
    Chat completion payload. Unknown keys (e.g. "citations") are kept.
    """
    id: str = ""
    object: Optional[str] = None
    created: Optional[int] = None
    model: str = ""
    choices: List[Choice] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    class Config:
        extra = "allow"

    @property
    def answer(self) -> str:
        """Text of the first choice, or "" when the payload has none."""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""
