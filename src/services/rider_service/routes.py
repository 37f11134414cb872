# src/services/rider_service/routes.py
from fastapi import APIRouter, Depends, Response

from src.relay.context import RIDE_ACCEPTED_SIGNAL, RelayContext
from src.relay.long_poll import answer_long_poll
from src.services.dependencies import get_relay
from src.shared.models.ride import RideDTO

router = APIRouter(prefix="/rides", tags=["Long-poll"])


@router.get(
    "/wait-for-acceptance",
    responses={
        200: {"model": RideDTO, "description": "Поездка принята"},
        204: {"description": "За время ожидания поездку не приняли"},
    },
)
async def wait_for_acceptance(relay: RelayContext = Depends(get_relay)) -> Response:
    """
    Ждёт принятия поездки.

    Событие, пришедшее, пока никто не ждёт, не сохраняется.
    """
    waiter = relay.acceptances.await_once(RIDE_ACCEPTED_SIGNAL)
    return await answer_long_poll(relay.acceptances, waiter)
