"""Comment on a pull request (issue comment)."""

from datetime import datetime

from pydantic import BaseModel


class Comment(BaseModel):
    """Comment on a pull request conversation."""

    id: int
    body: str
    author: str
    created_at: datetime
    updated_at: datetime
