"""Repository webhook."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class Hook(BaseModel):
    """Webhook registered on a repository."""

    id: int
    name: str = "web"
    config: Dict[str, Any] = Field(default_factory=dict)
    events: List[str] = Field(default_factory=list)
    active: bool = True
