"""Error details domain model."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """Details about an API error returned as a JSON body."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    status_code: int = 400
