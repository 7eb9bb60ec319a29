from pydantic import BaseModel, Field


class PromptRequest(BaseModel):
    """Body of POST /gemini and POST /openai."""

    prompt: str = Field(..., description="The user's prompt")


class GeminiReply(BaseModel):
    bot: str


class OpenAIReply(BaseModel):
    response: str


class ErrorReply(BaseModel):
    error: str


class HealthReply(BaseModel):
    message: str
