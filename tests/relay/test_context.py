# tests/relay/test_context.py
"""
Тесты RelayContext: связка брокера, диспетчера и реестров.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from src.common.constants import AckPolicy
from src.common.exceptions import BrokerUnavailable, DuplicateHandlerError
from src.config.loader import Settings
from src.infra.broker import BrokerConnection
from src.relay.context import RIDE_ACCEPTED_SIGNAL, RelayContext
from src.shared.events.ride_events import NewRideEvent, RideAcceptedEvent
from src.shared.models.ride import RideDTO


class TestFromSettings:
    """Тесты создания контекста из настроек."""

    def test_builds_from_settings(self) -> None:
        settings = Settings()
        settings.rabbitmq.RABBIT_URL = "amqp://guest:guest@mq:5672/"
        settings.rabbitmq.RABBITMQ_ACK_POLICY = AckPolicy.ON_SUCCESS
        settings.relay.LONG_POLL_TIMEOUT = 2.5

        relay = RelayContext.from_settings(settings)

        assert isinstance(relay.broker, BrokerConnection)
        assert relay.broker.ack_policy is AckPolicy.ON_SUCCESS
        assert relay.new_rides.timeout == 2.5
        assert relay.acceptances.timeout == 2.5
        assert relay.new_ride_topic == "new-ride"
        assert relay.ride_accepted_topic == "ride-accepted"


class TestListeners:
    """Тесты подписок сторон водителя и пассажира."""

    @pytest.mark.asyncio
    async def test_start_subscribes_registered_topics(self, relay: RelayContext, fake_broker) -> None:
        relay.listen_new_rides()
        relay.listen_acceptances()

        await relay.start()

        assert fake_broker.is_connected
        assert set(fake_broker.callbacks) == {"new-ride", "ride-accepted"}

    def test_listen_twice_rejected(self, relay: RelayContext) -> None:
        relay.listen_new_rides()

        with pytest.raises(DuplicateHandlerError):
            relay.listen_new_rides()

    @pytest.mark.asyncio
    async def test_new_ride_broadcast_to_waiters(
        self, relay: RelayContext, fake_broker, sample_ride: RideDTO
    ) -> None:
        """Новая поездка из топика достаётся всем ожидающим водителям."""
        relay.listen_new_rides()
        await relay.start()
        waiters = [relay.new_rides.register() for _ in range(2)]

        await fake_broker.deliver("new-ride", NewRideEvent(ride=sample_ride).to_json().encode())

        assert [w.payload for w in waiters] == [sample_ride, sample_ride]
        assert relay.new_rides.pending_count == 0

    @pytest.mark.asyncio
    async def test_acceptance_fires_signal(
        self, relay: RelayContext, fake_broker, sample_ride: RideDTO
    ) -> None:
        relay.listen_acceptances()
        await relay.start()
        waiter = relay.acceptances.await_once(RIDE_ACCEPTED_SIGNAL)

        await fake_broker.deliver("ride-accepted", RideAcceptedEvent(ride=sample_ride).to_json().encode())

        assert waiter.payload == sample_ride

    @pytest.mark.asyncio
    async def test_acceptance_without_listener_logged(
        self, relay: RelayContext, fake_broker, sample_ride: RideDTO
    ) -> None:
        """Принятие без ожидающего пассажира отбрасывается с предупреждением."""
        relay.listen_acceptances()
        await relay.start()

        with patch("src.relay.context.log_warning", new_callable=AsyncMock) as mock_warning:
            await fake_broker.deliver("ride-accepted", RideAcceptedEvent(ride=sample_ride).to_json().encode())

        mock_warning.assert_awaited_once()
        assert relay.acceptances.pending_count == 0

    @pytest.mark.asyncio
    async def test_start_without_broker(self, relay: RelayContext, fake_broker) -> None:
        fake_broker.fail_connect = True
        relay.listen_new_rides()

        with pytest.raises(BrokerUnavailable):
            await relay.start()

    @pytest.mark.asyncio
    async def test_close(self, relay: RelayContext, fake_broker) -> None:
        await relay.start()
        await relay.close()

        assert fake_broker.closed
