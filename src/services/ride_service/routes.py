# src/services/ride_service/routes.py
from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.common.exceptions import BrokerUnavailable, PublishFailure
from src.common.logger import log_error
from src.services.ride_service.dependencies import get_ride_service
from src.services.ride_service.service import RideService
from src.shared.models.common import ErrorResponse
from src.shared.models.ride import RideCreateRequest, RideDTO

router = APIRouter(prefix="/rides", tags=["Rides"])


@router.post(
    "/create-ride",
    response_model=RideDTO,
    status_code=status.HTTP_201_CREATED,
    responses={500: {"model": ErrorResponse, "description": "Событие не опубликовано"}},
)
async def create_ride(
    request: RideCreateRequest,
    service: RideService = Depends(get_ride_service),
):
    try:
        return await service.create_ride(request)
    except (BrokerUnavailable, PublishFailure) as e:
        await log_error(f"create-ride: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.put(
    "/accept-ride",
    response_model=RideDTO,
    responses={
        404: {"model": ErrorResponse, "description": "Поездка не найдена"},
        500: {"model": ErrorResponse, "description": "Событие не опубликовано"},
    },
)
async def accept_ride(
    ride_id: str = Query(..., alias="rideId"),
    captain_id: str | None = Query(default=None, alias="captainId"),
    service: RideService = Depends(get_ride_service),
):
    try:
        ride = await service.accept_ride(ride_id, captain=captain_id)
    except (BrokerUnavailable, PublishFailure) as e:
        await log_error(f"accept-ride {ride_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if ride is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ride not found")
    return ride


@router.get(
    "/{ride_id}",
    response_model=RideDTO,
    responses={404: {"model": ErrorResponse, "description": "Поездка не найдена"}},
)
async def get_ride(
    ride_id: str,
    service: RideService = Depends(get_ride_service),
):
    ride = await service.get_ride(ride_id)
    if ride is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ride not found")
    return ride
