from pydantic import BaseModel
from typing import Literal

ActorKind = Literal["user", "seller"]

class Actor(BaseModel):
    """Identidad autenticada del llamante, resuelta a partir del token."""
    id: str
    kind: ActorKind

    @property
    def counterpart_kind(self) -> str:
        return "seller" if self.kind == "user" else "user"
