import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..config import Settings
from ..dependencies import get_app_settings, get_business_service
from ..schemas import BusinessRegistration, BusinessView, ErrorResponse, SyncResponse
from ..services.business_service import BusinessService

router = APIRouter(
    prefix="/businesses",
    tags=["businesses"],
    responses={
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)


@router.post("/sync", response_model=SyncResponse)
def sync_businesses(
    country_code: str | None = Query(default=None, min_length=2, max_length=2),
    service: BusinessService = Depends(get_business_service),
    settings: Settings = Depends(get_app_settings),
) -> SyncResponse:
    result = service.sync_external(country_code or settings.default_country_code)
    return SyncResponse(businesses_synced=result.count, message=result.message)


@router.post("/register", response_model=BusinessView)
def register_business(
    registration: BusinessRegistration,
    service: BusinessService = Depends(get_business_service),
) -> BusinessView:
    business = service.register_business(registration)
    return BusinessView.from_business(business)


@router.get("/search", response_model=list[BusinessView])
def search_by_radius_and_category(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float = Query(gt=0),
    category: str = Query(min_length=1),
    limit: int | None = Query(default=None, ge=1),
    service: BusinessService = Depends(get_business_service),
) -> list[BusinessView]:
    businesses = service.search_by_radius_and_category(latitude, longitude, radius_km, category, limit)
    return [BusinessView.from_business(business) for business in businesses]


@router.get("/nearby", response_model=list[BusinessView])
def search_by_radius(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float = Query(gt=0),
    limit: int | None = Query(default=None, ge=1),
    service: BusinessService = Depends(get_business_service),
) -> list[BusinessView]:
    businesses = service.search_by_radius(latitude, longitude, radius_km, limit)
    return [BusinessView.from_business(business) for business in businesses]


@router.get("", response_model=list[BusinessView])
def list_businesses(
    category: str | None = Query(default=None),
    q: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
    service: BusinessService = Depends(get_business_service),
) -> list[BusinessView]:
    businesses = service.list_businesses(category=category, search_term=q, limit=limit)
    return [BusinessView.from_business(business) for business in businesses]


@router.get("/{business_id}", response_model=BusinessView)
def get_business(
    business_id: uuid.UUID,
    service: BusinessService = Depends(get_business_service),
) -> BusinessView:
    business = service.get_business(business_id)
    if business is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return BusinessView.from_business(business)


@router.delete("/{business_id}", status_code=204)
def delete_business(
    business_id: uuid.UUID,
    service: BusinessService = Depends(get_business_service),
) -> Response:
    if not service.delete_business(business_id):
        raise HTTPException(status_code=404, detail="Business not found or registered")
    return Response(status_code=204)
