# This project was developed with assistance from AI tools.
"""RFC 7807 Problem Details error response schema."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    ``field_errors`` is a problem-type extension member carrying
    per-field messages when a request body fails schema validation.
    """

    type: str = Field(default="about:blank")
    title: str = Field(description="Short human-readable summary of the problem.")
    status: int = Field(description="HTTP status code.")
    detail: str = Field(default="")
    request_id: str = Field(
        default="",
        description="Correlation ID for tracing this request in logs.",
    )
    field_errors: dict[str, str] = Field(default_factory=dict)
