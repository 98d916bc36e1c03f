"""
Todo Service - Pydantic Request/Response Schemas
=================================================

What:  Pydantic models defining the wire contract of the service.
How:   Request bodies are decoded with `TodoIn.model_validate_json()` by the
       pipeline (so decode failures become 400 envelopes, not FastAPI 422s);
       every response is an `Envelope` serialized with `to_wire()`.

Envelope format:
    { "data": <payload, optional>, "status": <int>, "error": <str, optional> }

    `data` is one of the payload shapes the service actually produces:
    a single TodoOut (create), a list of TodoOut (list), or a CountPayload
    (count). Update and delete carry no data.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class TodoIn(BaseModel):
    """
    What:  Body of POST /create and PUT /update/.
    Note:  `done` is ignored on create (new todos always start not done).
    """
    name: str = Field(description="Todo text")
    done: bool = Field(default=False, description="Completion flag")


# ══════════════════════════════════════════════════════════════════════════
# Payload Models
# ══════════════════════════════════════════════════════════════════════════


class TodoOut(BaseModel):
    """
    What:  A stored todo as returned to clients.
    Note:  `id` is omitted from the wire form when unassigned (None or 0).
    """
    id: Optional[int] = Field(default=None, description="Store-assigned identifier")
    name: str
    done: bool = False

    model_config = {"from_attributes": True}

    @field_validator("id")
    @classmethod
    def zero_id_is_unassigned(cls, v: Optional[int]) -> Optional[int]:
        return v or None


class CountPayload(BaseModel):
    """Payload of GET /count."""
    count: int


Payload = Union[List[TodoOut], TodoOut, CountPayload]


# ══════════════════════════════════════════════════════════════════════════
# Response Envelope
# ══════════════════════════════════════════════════════════════════════════


class Envelope(BaseModel):
    """
    Uniform response body for every request, success or failure.

    Exactly one of `data` / `error` is meaningful. `make_error()` clears any
    data attached earlier so a failed request never leaks a partial payload.
    """
    data: Optional[Payload] = None
    status: int
    error: Optional[str] = None

    @classmethod
    def success(cls, status: int, data: Optional[Payload] = None) -> "Envelope":
        return cls(data=data, status=status)

    @classmethod
    def failure(cls, status: int, message: str) -> "Envelope":
        envelope = cls(status=status)
        envelope.make_error(message, status)
        return envelope

    def make_error(self, message: str, status: int) -> None:
        self.status = status
        self.error = message
        self.data = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict with absent fields (None data/error/id) omitted."""
        return self.model_dump(mode="json", exclude_none=True)
