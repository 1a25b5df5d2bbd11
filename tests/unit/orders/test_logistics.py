"""Unit tests for courier assignment and the delivery queue."""

from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time

from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.core.authentication import Actor
from modules.core.exceptions import AccessDeniedError
from modules.orders.constants import OrderStatus
from modules.orders.dtos import (
    CreateOrderDTO,
    DeliveryAddressDTO,
    OrderItemRequestDTO,
    UpdateStatusDTO,
)
from modules.orders.exceptions import AlreadyAssignedError, InvalidStateError
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import CatalogService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        catalog=CatalogService(repository=ProductDjangoRepository()),
        user_repository=UserDjangoRepository(),
    )


@pytest.fixture()
def place(service, consumer, producer, product_a):
    def _place(quantity: int = 1):
        dto = CreateOrderDTO(
            producer_id=producer.id,
            items=[OrderItemRequestDTO(product_id=product_a.id, quantity=quantity)],
            delivery_address=DeliveryAddressDTO(street="Rua A"),
        )
        return service.create_order(Actor.from_user(consumer), dto)

    return _place


@pytest.fixture()
def make_ready(service, producer):
    def _ready(order):
        for status in (OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY):
            order = service.update_status(
                Actor.from_user(producer), str(order.id), UpdateStatusDTO(status=status)
            )
        return order

    return _ready


class TestAssignLogistics:
    def test_assigns_ready_order(self, service, courier, place, make_ready):
        order = make_ready(place())

        assigned = service.assign_logistics(Actor.from_user(courier), str(order.id))

        assert assigned.logistics_id == courier.id
        assert assigned.status == OrderStatus.READY

    def test_second_assignment_fails(
        self, service, courier, other_courier, place, make_ready
    ):
        order = make_ready(place())
        service.assign_logistics(Actor.from_user(courier), str(order.id))

        with pytest.raises(AlreadyAssignedError):
            service.assign_logistics(Actor.from_user(other_courier), str(order.id))
        with pytest.raises(AlreadyAssignedError):
            service.assign_logistics(Actor.from_user(courier), str(order.id))

    def test_order_not_ready(self, service, courier, place):
        order = place()
        with pytest.raises(InvalidStateError):
            service.assign_logistics(Actor.from_user(courier), str(order.id))

    def test_only_couriers(self, service, consumer, place, make_ready):
        order = make_ready(place())
        with pytest.raises(AccessDeniedError):
            service.assign_logistics(Actor.from_user(consumer), str(order.id))

    def test_assigned_courier_can_read_and_list(
        self, service, courier, place, make_ready
    ):
        order = make_ready(place())
        service.assign_logistics(Actor.from_user(courier), str(order.id))

        actor = Actor.from_user(courier)
        assert service.get_order(actor, str(order.id)).id == order.id
        assert [o.id for o in service.list_orders(actor)] == [order.id]


class TestAvailableForLogistics:
    def test_lists_unassigned_ready_orders_oldest_first(
        self, service, courier, place, make_ready
    ):
        with freeze_time("2026-03-01 10:00:00") as frozen:
            first = place()
            frozen.tick(timedelta(minutes=5))
            second = place()
            frozen.tick(timedelta(minutes=5))
            place()  # stays pending
            frozen.tick(timedelta(minutes=5))
            taken = place()

        make_ready(second)
        make_ready(first)
        make_ready(taken)
        service.assign_logistics(Actor.from_user(courier), str(taken.id))

        available = service.list_available_for_logistics(Actor.from_user(courier))

        assert [o.id for o in available] == [first.id, second.id]

    def test_only_couriers(self, service, producer):
        with pytest.raises(AccessDeniedError):
            service.list_available_for_logistics(Actor.from_user(producer))
