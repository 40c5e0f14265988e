# This project was developed with assistance from AI tools.
"""Document submission result schema."""

from typing import Literal

from pydantic import BaseModel, Field


class SubmissionResponse(BaseModel):
    """Tagged outcome of a document submission.

    ``field_errors`` is keyed by multipart field name (``document_<type>``)
    and is only populated for validation failures.
    """

    status: Literal["success", "error"]
    message: str
    field_errors: dict[str, str] = Field(default_factory=dict)
