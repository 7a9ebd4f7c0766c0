"""Error body shared by the JSON exception handlers"""

from pydantic import BaseModel
from typing import Optional


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: Optional[str] = None
