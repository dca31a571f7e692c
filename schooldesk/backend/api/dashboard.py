from fastapi import APIRouter, Depends, Request
from typing import List

from ..services.dashboard_service import DashboardService, navigation_for
from ..models.db_models import User
from .schemas.dashboard import NavigationItem, DashboardResponse
from .auth import require_staff
from .dependencies import get_dashboard_service
from .utilities.limiter import limiter

router = APIRouter(tags=["Dashboard"])


@router.get("/navigation", response_model=List[NavigationItem], summary="Pages available to the current user")
@limiter.limit("120/minute")
async def get_navigation(request: Request, user: User = Depends(require_staff)):
    return navigation_for(user)


@router.get("/dashboard", response_model=DashboardResponse, summary="Role-specific dashboard")
@limiter.limit("60/minute")
async def get_dashboard(request: Request, user: User = Depends(require_staff),
                        service: DashboardService = Depends(get_dashboard_service)):
    return await service.get_dashboard(user)
