"""Remote repository handle."""

from pydantic import BaseModel


class Repository(BaseModel):
    """Repository resolved by full name (owner/repo)."""

    full_name: str
    html_url: str
    default_branch: str = "main"
