"""Action result envelope shared by every endpoint.

Success:  {"ok": true, "data": ...}
Failure:  {"ok": false, "code": "...", "message": "...", "issues": [...]}
"""

from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel

from app.core.errors import ErrorCode

T = TypeVar("T")


class ActionSuccess(BaseModel, Generic[T]):
    ok: Literal[True] = True
    data: T


class ActionFailure(BaseModel):
    ok: Literal[False] = False
    code: ErrorCode
    message: str
    issues: Optional[List[Dict[str, Any]]] = None
