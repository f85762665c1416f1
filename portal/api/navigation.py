"""
Navigation endpoint: the menu routes open to the caller's role.
"""
from fastapi import APIRouter, Depends

from portal.core.auth import get_viewer_session
from portal.core.roles import navigation_for, permissions_for
from portal.core.session import ViewerSession
from portal.schemas.navigation import NavigationResponse

router = APIRouter()


@router.get("/navigation", response_model=NavigationResponse)
async def get_navigation(viewer: ViewerSession = Depends(get_viewer_session)):
    """Return the routes and permissions of the caller's role."""
    return NavigationResponse(
        role=viewer.role,
        routes=navigation_for(viewer.role),
        permissions=sorted(p.value for p in permissions_for(viewer.role)),
    )
