"""
Per-request viewer session.
"""
from typing import Optional
from pydantic import BaseModel

from portal.core.roles import Role


class ViewerSession(BaseModel):
    """
    Identity and display details of the user making a request.
    
    Built once per request by the auth dependency and passed explicitly to
    services, including display data such as the avatar URL.
    """
    user_id: int
    name: str
    role: Role
    organization_id: int
    avatar: Optional[str] = None
    
    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
    
    @classmethod
    def from_user(cls, user) -> "ViewerSession":
        return cls(
            user_id=user.id,
            name=user.name,
            role=user.role,
            organization_id=user.organization_id,
            avatar=user.avatar,
        )
