"""
Pydantic models for the JSON bodies exchanged with the job service.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmitPayload(BaseModel):
    """Body of `POST /download`."""

    url: str


class SubmitResponse(BaseModel):
    """Body returned by `POST /download`."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    task_id: str = Field(..., min_length=1)


class StatusResponse(BaseModel):
    """
    Body returned by `GET /status/{task_id}`.

    Both fields are optional on purpose: an odd shape is a job outcome
    (silent failure), not a parse error.
    """

    model_config = ConfigDict(extra="ignore")

    status: Optional[str] = None
    url: Optional[str] = None
