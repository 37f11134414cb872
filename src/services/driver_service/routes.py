# src/services/driver_service/routes.py
from fastapi import APIRouter, Depends, Response

from src.relay.context import RelayContext
from src.relay.long_poll import answer_long_poll
from src.services.dependencies import get_relay
from src.shared.models.ride import RideDTO

router = APIRouter(prefix="/rides", tags=["Long-poll"])


@router.get(
    "/wait-for-new-ride",
    responses={
        200: {"model": RideDTO, "description": "Новая поездка"},
        204: {"description": "За время ожидания поездок не было"},
    },
)
async def wait_for_new_ride(relay: RelayContext = Depends(get_relay)) -> Response:
    """
    Ждёт следующую новую поездку.

    Все водители, ожидающие в момент появления поездки, получают её
    одновременно; после 204 клиент сразу повторяет запрос.
    """
    waiter = relay.new_rides.register()
    return await answer_long_poll(relay.new_rides, waiter)
