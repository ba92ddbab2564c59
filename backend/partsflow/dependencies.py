"""
FastAPI dependencies shared by the routers.

Authentication happens in front of this service; the caller's identity only
reaches us through the ``X-User`` header and is recorded on audit fields.
"""
from typing import Optional

from fastapi import Header

from partsflow.config import settings


def get_actor(x_user: Optional[str] = Header(default=None, max_length=50)) -> str:
    actor = (x_user or "").strip()
    return actor or settings.DEFAULT_ACTOR
