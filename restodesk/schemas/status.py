"""Status transition command schemas"""

from pydantic import BaseModel


class StatusUpdate(BaseModel):
    """Requested target status"""
    status: str
