"""Unit tests for OrderService.

Covers:
- Order creation with snapshot pricing and stock reservation.
- Line validation (missing, unavailable, insufficient stock, foreign
  producer) with no partial reservation.
- Role/ownership gated status transitions and delivery stamping.
- History recording and domain events published after commit.
- Read access restricted to the parties of an order.
"""

from __future__ import annotations

from decimal import Decimal
from unittest import mock
from uuid import uuid4

import pytest

from modules.accounts.exceptions import UserNotFound
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
from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.orders.exceptions import ForbiddenTransitionError, OrderNotFound
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.exceptions import (
    InsufficientStockError,
    OwnershipMismatchError,
    ProductNotFound,
    UnavailableError,
)
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import CatalogService

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def bus():
    return mock.Mock()


@pytest.fixture()
def service(bus):
    return OrderService(
        order_repository=OrderDjangoRepository(event_bus=bus),
        catalog=CatalogService(repository=ProductDjangoRepository()),
        user_repository=UserDjangoRepository(),
    )


@pytest.fixture()
def order_dto(producer, product_a, product_b):
    return CreateOrderDTO(
        producer_id=producer.id,
        items=[
            OrderItemRequestDTO(product_id=product_a.id, quantity=2),
            OrderItemRequestDTO(product_id=product_b.id, quantity=3),
        ],
        delivery_address=DeliveryAddressDTO(street="Rua das Flores", number="123"),
        delivery_fee=Decimal("5.00"),
        notes="Entregar pela manhã",
    )


def _dto(producer, *lines, fee="0.00"):
    return CreateOrderDTO(
        producer_id=producer.id,
        items=[
            OrderItemRequestDTO(product_id=product.id, quantity=quantity)
            for product, quantity in lines
        ],
        delivery_address=DeliveryAddressDTO(street="Rua A"),
        delivery_fee=Decimal(fee),
    )


def _stock(product: Product) -> int:
    product.refresh_from_db()
    return product.stock


# ===========================================================================
# create_order: Happy Path
# ===========================================================================


class TestCreateOrderSuccess:
    def test_totals_and_reserves_stock(self, service, consumer, order_dto, product_a, product_b):
        order = service.create_order(Actor.from_user(consumer), order_dto)

        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Decimal("31.00")
        assert _stock(product_a) == 48
        assert _stock(product_b) == 27

    def test_captures_price_snapshot(self, service, consumer, order_dto, product_a):
        order = service.create_order(Actor.from_user(consumer), order_dto)

        product_a.price = Decimal("99.90")
        product_a.name = "Tomate italiano"
        product_a.save()

        order.refresh_from_db()
        line = next(i for i in order.items if i["product_id"] == str(product_a.id))
        assert line["price"] == "8.50"
        assert line["product_name"] == "Tomate"
        assert line["unit"] == "kg"
        assert order.total_amount == Decimal("31.00")

    def test_sets_parties_and_address(self, service, consumer, producer, order_dto):
        order = service.create_order(Actor.from_user(consumer), order_dto)

        assert order.consumer_id == consumer.id
        assert order.producer_id == producer.id
        assert order.logistics_id is None
        assert order.delivery_address["street"] == "Rua das Flores"
        assert order.notes == "Entregar pela manhã"

    def test_records_initial_history(self, service, consumer, order_dto):
        order = service.create_order(Actor.from_user(consumer), order_dto)

        history = list(OrderStatusHistory.objects.filter(order=order))
        assert len(history) == 1
        assert history[0].old_status is None
        assert history[0].new_status == OrderStatus.PENDING
        assert history[0].actor_id == consumer.id
        assert history[0].actor_role == "consumer"

    def test_publishes_created_event_on_commit(
        self, service, bus, consumer, order_dto, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order = service.create_order(Actor.from_user(consumer), order_dto)

        published = [c.args[0] for c in bus.publish_on_commit.call_args_list]
        events = [e for batch in published for e in batch]
        assert [type(e) for e in events] == [OrderCreated]
        assert events[0].aggregate_id == order.id
        assert events[0].total_amount == "31.00"


# ===========================================================================
# create_order: Validation failures (no partial reservation)
# ===========================================================================


class TestCreateOrderFailures:
    def test_insufficient_stock_rejects_whole_order(
        self, service, consumer, producer, product_a, make_product
    ):
        scarce = make_product(name="Mel", stock=5)
        dto = _dto(producer, (product_a, 2), (scarce, 10))

        with pytest.raises(InsufficientStockError):
            service.create_order(Actor.from_user(consumer), dto)

        assert _stock(product_a) == 50
        assert _stock(scarce) == 5
        assert Order.objects.count() == 0

    def test_unknown_product(self, service, consumer, producer):
        dto = CreateOrderDTO(
            producer_id=producer.id,
            items=[OrderItemRequestDTO(product_id=uuid4(), quantity=1)],
            delivery_address=DeliveryAddressDTO(street="Rua A"),
        )
        with pytest.raises(ProductNotFound):
            service.create_order(Actor.from_user(consumer), dto)

    def test_soft_deleted_product_cannot_be_ordered(
        self, service, consumer, producer, product_a
    ):
        product_a.delete()
        with pytest.raises(ProductNotFound):
            service.create_order(Actor.from_user(consumer), _dto(producer, (product_a, 1)))

    def test_unavailable_product(self, service, consumer, producer, make_product):
        hidden = make_product(is_available=False)
        with pytest.raises(UnavailableError):
            service.create_order(Actor.from_user(consumer), _dto(producer, (hidden, 1)))
        assert _stock(hidden) == 50

    def test_product_of_other_producer(
        self, service, consumer, producer, other_producer, product_a, make_product
    ):
        foreign = make_product(producer=other_producer, name="Queijo")
        dto = _dto(producer, (product_a, 1), (foreign, 1))

        with pytest.raises(OwnershipMismatchError):
            service.create_order(Actor.from_user(consumer), dto)

        assert _stock(product_a) == 50
        assert _stock(foreign) == 50

    def test_unknown_producer(self, service, consumer, product_a, courier):
        dto = CreateOrderDTO(
            producer_id=courier.id,
            items=[OrderItemRequestDTO(product_id=product_a.id, quantity=1)],
            delivery_address=DeliveryAddressDTO(street="Rua A"),
        )
        with pytest.raises(UserNotFound):
            service.create_order(Actor.from_user(consumer), dto)

    def test_only_consumers_place_orders(self, service, producer, order_dto):
        with pytest.raises(AccessDeniedError):
            service.create_order(Actor.from_user(producer), order_dto)

    def test_stock_taken_after_validation_rolls_back(
        self, service, consumer, producer, product_a, product_b
    ):
        """A competing write between the check and the reservation."""
        dto = _dto(producer, (product_a, 2), (product_b, 30))
        catalog = service._catalog
        original_reserve = catalog.reserve

        def competing_reserve(product_id, quantity):
            if product_id == str(product_b.id):
                Product.objects.filter(id=product_b.id).update(stock=10)
            return original_reserve(product_id, quantity)

        with mock.patch.object(catalog, "reserve", side_effect=competing_reserve):
            with pytest.raises(InsufficientStockError):
                service.create_order(Actor.from_user(consumer), dto)

        assert _stock(product_a) == 50
        assert Order.objects.count() == 0


# ===========================================================================
# update_status
# ===========================================================================


@pytest.fixture()
def placed_order(service, consumer, order_dto):
    return service.create_order(Actor.from_user(consumer), order_dto)


def _advance(service, actor_user, order, *statuses):
    for status in statuses:
        order = service.update_status(
            Actor.from_user(actor_user), str(order.id), UpdateStatusDTO(status=status)
        )
    return order


class TestUpdateStatus:
    def test_producer_moves_order_to_ready(self, service, producer, placed_order):
        order = _advance(
            service,
            producer,
            placed_order,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
        )
        assert order.status == OrderStatus.READY
        assert order.version == 4

    def test_full_lifecycle_stamps_delivered_at(
        self, service, producer, courier, placed_order
    ):
        order = _advance(
            service,
            producer,
            placed_order,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
        )
        order = service.assign_logistics(Actor.from_user(courier), str(order.id))
        assert order.logistics_id == courier.id

        order = _advance(
            service, courier, order, OrderStatus.IN_DELIVERY, OrderStatus.DELIVERED
        )
        assert order.status == OrderStatus.DELIVERED
        assert order.delivered_at is not None

    def test_skipping_a_step_is_forbidden(self, service, producer, placed_order):
        with pytest.raises(ForbiddenTransitionError):
            _advance(service, producer, placed_order, OrderStatus.READY)

    def test_consumer_cannot_confirm(self, service, consumer, placed_order):
        with pytest.raises(ForbiddenTransitionError):
            _advance(service, consumer, placed_order, OrderStatus.CONFIRMED)

    def test_other_producer_cannot_transition(
        self, service, other_producer, placed_order
    ):
        with pytest.raises(ForbiddenTransitionError):
            _advance(service, other_producer, placed_order, OrderStatus.CONFIRMED)

    def test_unassigned_courier_cannot_deliver(
        self, service, producer, courier, other_courier, placed_order
    ):
        order = _advance(
            service,
            producer,
            placed_order,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
        )
        service.assign_logistics(Actor.from_user(courier), str(order.id))

        with pytest.raises(ForbiddenTransitionError):
            _advance(service, other_courier, order, OrderStatus.IN_DELIVERY)

    def test_consumer_cancel_through_status_releases_stock(
        self, service, consumer, placed_order, product_a, product_b
    ):
        order = _advance(service, consumer, placed_order, OrderStatus.CANCELLED)

        assert order.status == OrderStatus.CANCELLED
        assert _stock(product_a) == 50
        assert _stock(product_b) == 30

    def test_records_history_per_transition(self, service, producer, placed_order):
        _advance(service, producer, placed_order, OrderStatus.CONFIRMED)

        history = list(
            OrderStatusHistory.objects.filter(order_id=placed_order.id).values_list(
                "old_status", "new_status", "actor_role"
            )
        )
        assert history == [
            (None, "pending", "consumer"),
            ("pending", "confirmed", "producer"),
        ]

    def test_emits_status_changed_event(self, service, bus, producer, placed_order):
        bus.reset_mock()
        _advance(service, producer, placed_order, OrderStatus.CONFIRMED)

        events = [e for c in bus.publish_on_commit.call_args_list for e in c.args[0]]
        assert len(events) == 1
        assert isinstance(events[0], OrderStatusChanged)
        assert (events[0].old_status, events[0].new_status) == ("pending", "confirmed")

    def test_unknown_order(self, service, producer):
        with pytest.raises(OrderNotFound):
            service.update_status(
                Actor.from_user(producer),
                str(uuid4()),
                UpdateStatusDTO(status=OrderStatus.CONFIRMED),
            )


# ===========================================================================
# Queries
# ===========================================================================


class TestGetOrder:
    def test_parties_can_read(self, service, consumer, producer, placed_order):
        for user in (consumer, producer):
            order = service.get_order(Actor.from_user(user), str(placed_order.id))
            assert order.id == placed_order.id

    def test_outsider_is_denied(self, service, other_consumer, placed_order):
        with pytest.raises(AccessDeniedError):
            service.get_order(Actor.from_user(other_consumer), str(placed_order.id))

    def test_invalid_id_is_not_found(self, service, consumer):
        with pytest.raises(OrderNotFound):
            service.get_order(Actor.from_user(consumer), "not-a-uuid")


class TestListOrders:
    def test_scoped_by_role(
        self, service, consumer, other_consumer, producer, courier, placed_order
    ):
        assert [o.id for o in service.list_orders(Actor.from_user(consumer))] == [
            placed_order.id
        ]
        assert [o.id for o in service.list_orders(Actor.from_user(producer))] == [
            placed_order.id
        ]
        assert list(service.list_orders(Actor.from_user(other_consumer))) == []
        assert list(service.list_orders(Actor.from_user(courier))) == []
