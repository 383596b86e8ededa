"""Data models for parsed Bruno request files.

The Document Extractor turns every `.bru` file into a BruFile; the
generators only ever see these models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExampleResponse(BaseModel):
    """One saved example response, keyed by its status code."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(gt=0)
    body: Any = None
    headers: dict | None = None


class BruFile(BaseModel):
    """A single request document with everything the generators need."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    method: str  # get / post / ... / unknown
    url: str  # {{baseUrl}}/users/:id
    body: Any = None
    headers: dict | None = None
    query: dict | None = None
    params: dict | None = None  # path parameters
    responses: list[ExampleResponse] = []
