"""Unit tests for ``OrderDjangoRepository`` write paths."""

from __future__ import annotations

from unittest import mock

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.events import OrderStatusChanged
from modules.orders.exceptions import InvalidStateError
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def bus():
    return mock.Mock()


@pytest.fixture()
def repo(bus):
    return OrderDjangoRepository(event_bus=bus)


@pytest.fixture()
def order(repo, consumer, producer, product_a):
    order = Order(
        consumer=consumer,
        producer=producer,
        delivery_address={"street": "Rua A"},
        items=[],
    )
    order.add_item(product_a.id, product_a.name, product_a.price, 2, product_a.unit)
    return repo.save(order)


class TestSave:
    def test_insert_keeps_version_one(self, order):
        stored = Order.objects.get(id=order.id)
        assert stored.version == 1
        assert stored.total_amount == order.total_amount

    def test_update_bumps_version(self, repo, order):
        loaded = repo.get_by_id(str(order.id))
        loaded.status = OrderStatus.CONFIRMED

        repo.save(loaded)

        stored = Order.objects.get(id=order.id)
        assert (stored.status, stored.version) == (OrderStatus.CONFIRMED, 2)
        assert loaded.version == 2

    def test_stale_write_is_rejected(self, repo, order):
        first = repo.get_by_id(str(order.id))
        second = repo.get_by_id(str(order.id))
        first.status = OrderStatus.CONFIRMED
        repo.save(first)

        second.status = OrderStatus.CANCELLED
        with pytest.raises(InvalidStateError):
            repo.save(second)

        assert Order.objects.get(id=order.id).status == OrderStatus.CONFIRMED

    def test_pending_events_are_handed_to_the_bus(self, repo, bus, order):
        loaded = repo.get_by_id(str(order.id))
        event = OrderStatusChanged(
            aggregate_id=loaded.id, old_status="pending", new_status="confirmed"
        )
        loaded.add_domain_event(event)

        repo.save(loaded)

        bus.publish_on_commit.assert_called_with([event])
        assert loaded.domain_events == []


class TestReads:
    def test_invalid_id_returns_none(self, repo):
        assert repo.get_by_id("not-a-uuid") is None
        assert repo.get_for_update("not-a-uuid") is None

    def test_history_is_ordered(self, repo, order, consumer):
        repo.add_history(order, new_status="pending", actor_id=consumer.id)
        repo.add_history(order, new_status="cancelled", old_status="pending")

        loaded = repo.get_by_id(str(order.id))

        assert [h.new_status for h in loaded.status_history.all()] == [
            "pending",
            "cancelled",
        ]

    def test_delete_removes_order(self, repo, order):
        assert repo.delete(str(order.id)) is True
        assert repo.get_by_id(str(order.id)) is None
