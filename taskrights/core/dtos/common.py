
from pydantic import BaseModel
from typing import Any, Dict


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Dict[str, Any] = {}


class MessageResponse(BaseModel):
    success: bool
    message: str
