from pydantic import BaseModel
from typing import Any, Optional

class OperationResult(BaseModel):
    """Sobre uniforme que devuelven todas las operaciones de mensajería"""
    success: bool
    message: str
    code: Optional[str] = None
    data: Optional[Any] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, code: str, data: Any = None) -> "OperationResult":
        return cls(success=False, message=message, code=code, data=data)
