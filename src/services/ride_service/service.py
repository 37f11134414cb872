# src/services/ride_service/service.py
"""
Бизнес-логика Ride Service: создание и принятие поездок.
"""

from __future__ import annotations

from src.common.constants import RideStatus, TypeMsg
from src.common.logger import log_info
from src.infra.publisher import TopicPublisher
from src.services.ride_service.repository import RideRepository
from src.shared.events.base import EventMetadata
from src.shared.events.ride_events import NewRideEvent, RideAcceptedEvent
from src.shared.models.ride import RideCreateRequest, RideDTO


class RideService:
    """
    Сервис поездок.

    Каждое изменение сохраняется и публикуется в соответствующий топик.
    Ошибки публикации (BrokerUnavailable, PublishFailure) пробрасываются
    в обработчик запроса.
    """

    def __init__(
        self,
        repository: RideRepository,
        publisher: TopicPublisher,
        new_ride_topic: str,
        ride_accepted_topic: str,
        source_service: str = "ride_service",
    ) -> None:
        self.repository = repository
        self.publisher = publisher
        self.new_ride_topic = new_ride_topic
        self.ride_accepted_topic = ride_accepted_topic
        self.source_service = source_service

    async def create_ride(self, request: RideCreateRequest) -> RideDTO:
        """Создаёт поездку и публикует её в топик новых поездок."""
        ride = RideDTO(
            user=request.user,
            pickup=request.pickup,
            destination=request.destination,
        )
        await self.repository.save(ride)

        await self.publisher.publish_event(
            self.new_ride_topic,
            NewRideEvent(ride=ride, metadata=EventMetadata(source_service=self.source_service)),
        )
        await log_info(f"Создана поездка {ride.id}", type_msg=TypeMsg.INFO)
        return ride

    async def accept_ride(self, ride_id: str, captain: str | None = None) -> RideDTO | None:
        """
        Переводит поездку в статус accepted и публикует событие.

        Returns:
            Обновлённая поездка или None, если поездка не найдена
        """
        ride = await self.repository.get(ride_id)
        if ride is None:
            return None

        accepted = ride.with_status(RideStatus.ACCEPTED, captain=captain)
        await self.repository.save(accepted)

        await self.publisher.publish_event(
            self.ride_accepted_topic,
            RideAcceptedEvent(ride=accepted, metadata=EventMetadata(source_service=self.source_service)),
        )
        await log_info(f"Поездка {ride_id} принята", type_msg=TypeMsg.INFO)
        return accepted

    async def get_ride(self, ride_id: str) -> RideDTO | None:
        return await self.repository.get(ride_id)
