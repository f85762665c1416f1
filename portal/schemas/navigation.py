"""
Navigation schemas.
"""
from typing import List
from pydantic import BaseModel

from portal.core.roles import Role


class NavigationResponse(BaseModel):
    """Routes the caller's role may open, in menu order."""
    role: Role
    routes: List[str]
    permissions: List[str]
