"""Order service layer (Use Cases).

Orchestrates the order lifecycle: creation with stock reservation,
role-gated status transitions, cancellation with stock release,
logistics assignment and producer statistics.  Every write runs in one
transaction; the service defines the unit-of-work boundary.

Business rules enforced:
- Only consumers place orders, against exactly one producer's catalog.
- Every line is validated (exists, available, enough stock, owned by
  the target producer) before anything is written.
- Stock reservation is a conditional write per line; any failure rolls
  back the order insert and every earlier reservation.
- Transitions follow the static ``(role, status)`` table and require the
  actor to own (producer, consumer) or carry (logistics) the order.
- Stock is released exactly once, in the transaction that moves the
  order to ``cancelled`` under the order row lock.
- Each status change records a history entry and a domain event.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.accounts.constants import UserRole
from modules.accounts.exceptions import UserNotFound
from modules.core.exceptions import AccessDeniedError
from modules.orders.constants import (
    OrderStatus,
    allowed_transitions,
    can_cancel,
)
from modules.orders.events import (
    LogisticsAssigned,
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    AlreadyAssignedError,
    ForbiddenTransitionError,
    InvalidStateError,
    OrderNotFound,
)
from modules.orders.models import Order
from modules.products.exceptions import (
    InsufficientStockError,
    OwnershipMismatchError,
    UnavailableError,
)

if TYPE_CHECKING:
    from datetime import datetime

    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.core.authentication import Actor
    from modules.orders.dtos import CreateOrderDTO, UpdateStatusDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.services import CatalogService

logger = structlog.get_logger(__name__)

# Which order FK identifies the actor as the acting party, per role.
PARTY_FIELD: Dict[str, str] = {
    UserRole.CONSUMER: "consumer",
    UserRole.PRODUCER: "producer",
    UserRole.LOGISTICS: "logistics",
}


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        catalog: CatalogService,
        user_repository: IUserRepository,
    ) -> None:
        self._order_repo = order_repository
        self._catalog = catalog
        self._user_repo = user_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, actor: Actor, dto: CreateOrderDTO) -> Order:
        """Create a ``pending`` order and reserve stock for every line.

        Steps:
        1. Check the actor is a consumer and the producer exists.
        2. Validate every line: product exists, is available, has enough
           stock and belongs to the target producer.
        3. Build the aggregate from catalog snapshots.
        4. Insert the order, then reserve each line (sorted by product id)
           with a conditional write.
        5. Record the initial history entry.

        Raises:
            AccessDeniedError: actor is not a consumer.
            UserNotFound: producer does not exist or is inactive.
            ProductNotFound: a product does not exist.
            UnavailableError: a product is switched off.
            InsufficientStockError: a line asks for more than is in stock,
                or lost the stock to a concurrent order.
            OwnershipMismatchError: a product belongs to another producer.
        """
        if actor.role != UserRole.CONSUMER:
            raise AccessDeniedError("Only consumers can place orders.")

        log = logger.bind(
            consumer_id=str(actor.id), producer_id=str(dto.producer_id)
        )
        log.info("order.creation_started", item_count=len(dto.items))

        producer = self._user_repo.get_by_id(str(dto.producer_id))
        if not producer or not producer.is_active or not producer.is_producer:
            raise UserNotFound(f"Producer {dto.producer_id} not found.")

        # 1. Validate every line before any write
        products = []
        for line in dto.items:
            product = self._catalog.get_product(str(line.product_id))
            if not product.is_available:
                raise UnavailableError(f"Product '{product.name}' is not available.")
            if product.stock < line.quantity:
                raise InsufficientStockError(
                    f"Insufficient stock for '{product.name}': "
                    f"requested {line.quantity}, available {product.stock}."
                )
            if not product.is_owned_by(dto.producer_id):
                raise OwnershipMismatchError(
                    f"Product '{product.name}' does not belong to this producer."
                )
            products.append((product, line.quantity))

        # 2. Build the aggregate from catalog snapshots
        order = Order(
            consumer_id=actor.id,
            producer_id=dto.producer_id,
            delivery_fee=dto.delivery_fee,
            delivery_address=dto.delivery_address.model_dump(),
            notes=dto.notes,
            estimated_delivery_time=dto.estimated_delivery_time,
            status=OrderStatus.PENDING,
            items=[],
        )
        for product, quantity in products:
            order.add_item(
                product.id, product.name, product.price, quantity, product.unit
            )

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                actor_id=actor.id,
                producer_id=dto.producer_id,
                total_amount=str(order.total_amount),
            )
        )

        # 3. Persist + reserve (same transaction)
        self._order_repo.save(order)
        for product_id, quantity in order.line_quantities():
            self._catalog.reserve(product_id, quantity)
            log.info(
                "order.stock_reserved", product_id=product_id, quantity=quantity
            )

        self._order_repo.add_history(
            order,
            new_status=OrderStatus.PENDING,
            actor_id=actor.id,
            actor_role=actor.role,
            notes="Order created",
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def update_status(self, actor: Actor, order_id: str, dto: UpdateStatusDTO) -> Order:
        """Move an order along the lifecycle.

        Acquires a row-level lock on the order before validating the
        transition against the ``(role, status)`` table.

        Raises:
            OrderNotFound: order does not exist.
            ForbiddenTransitionError: the transition is not in the table
                or the actor is not the acting party of the order.
        """
        order = self._lock(order_id)
        new_status = dto.status
        log = logger.bind(
            order_id=str(order.id),
            actor_id=str(actor.id),
            role=actor.role,
            current_status=order.status,
            new_status=new_status,
        )

        if new_status not in allowed_transitions(actor.role, order.status):
            log.warning("order.invalid_transition")
            raise ForbiddenTransitionError(
                f"Role '{actor.role}' cannot move an order from "
                f"'{order.status}' to '{new_status}'."
            )
        if not self._is_acting_party(actor, order):
            log.warning("order.transition_not_party")
            raise ForbiddenTransitionError(
                "You are not allowed to change the status of this order."
            )

        if new_status == OrderStatus.CANCELLED:
            self._cancel(order, actor, dto.notes)
        else:
            old_status = order.status
            order.status = new_status
            if new_status == OrderStatus.DELIVERED:
                order.delivered_at = timezone.now()
            order.add_domain_event(
                OrderStatusChanged(
                    aggregate_id=order.id,
                    actor_id=actor.id,
                    old_status=old_status,
                    new_status=new_status,
                )
            )
            self._order_repo.save(order)
            self._order_repo.add_history(
                order,
                new_status=new_status,
                old_status=old_status,
                actor_id=actor.id,
                actor_role=actor.role,
                notes=dto.notes,
            )

        log.info("order.status_updated")
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def cancel_order(self, actor: Actor, order_id: str, reason: str = "") -> Order:
        """Cancel an order and release its reserved stock.

        Consumers may cancel their own order while ``pending`` or
        ``confirmed``; producers their own order while ``pending``.

        Raises:
            OrderNotFound: order does not exist.
            AccessDeniedError: actor is not a party to the order.
            InvalidStateError: order is already ``cancelled`` or
                ``delivered``.
            ForbiddenTransitionError: the actor's role may not cancel from
                the current status.
        """
        order = self._lock(order_id)
        log = logger.bind(
            order_id=str(order.id), actor_id=str(actor.id), current_status=order.status
        )

        if not order.is_party(actor.id):
            raise AccessDeniedError("You do not have access to this order.")
        if order.is_terminal:
            log.warning("order.cancel_terminal")
            raise InvalidStateError(f"Order is already {order.status}.")
        if not (can_cancel(actor.role, order.status) and self._is_acting_party(actor, order)):
            log.warning("order.cancel_not_allowed", role=actor.role)
            raise ForbiddenTransitionError(
                f"Role '{actor.role}' cannot cancel an order in status "
                f"'{order.status}'."
            )

        self._cancel(order, actor, reason)
        log.info("order.cancelled")
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def assign_logistics(self, actor: Actor, order_id: str) -> Order:
        """Self-assign a courier to a ``ready`` order.

        Raises:
            AccessDeniedError: actor is not a logistics courier.
            OrderNotFound: order does not exist.
            AlreadyAssignedError: a courier is already assigned.
            InvalidStateError: order is not ``ready``.
        """
        if actor.role != UserRole.LOGISTICS:
            raise AccessDeniedError("Only logistics couriers can take deliveries.")

        order = self._lock(order_id)
        log = logger.bind(order_id=str(order.id), logistics_id=str(actor.id))

        if order.logistics_id is not None:
            log.warning("order.already_assigned")
            raise AlreadyAssignedError()
        if order.status != OrderStatus.READY:
            log.warning("order.assign_not_ready", status=order.status)
            raise InvalidStateError(
                f"Only ready orders can be assigned (current: '{order.status}')."
            )

        order.logistics_id = actor.id
        order.add_domain_event(
            LogisticsAssigned(
                aggregate_id=order.id, actor_id=actor.id, logistics_id=actor.id
            )
        )
        self._order_repo.save(order)
        log.info("order.logistics_assigned")
        return self._order_repo.get_by_id(str(order.id)) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, actor: Actor, order_id: str) -> Order:
        """Retrieve an order the actor is a party to.

        Raises:
            OrderNotFound: if the order does not exist.
            AccessDeniedError: if the actor is not a party to it.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not order.is_party(actor.id):
            logger.warning(
                "order.access_denied", order_id=str(order_id), actor_id=str(actor.id)
            )
            raise AccessDeniedError("You do not have access to this order.")
        return order

    def list_orders(self, actor: Actor):
        """Orders scoped to the actor's role, newest first.

        Consumers see the orders they placed, producers the orders they
        received and couriers the orders assigned to them.  Returns a
        lazy queryset so the API layer can apply its filters.
        """
        field = PARTY_FIELD.get(actor.role)
        if field is None:
            raise AccessDeniedError("Unknown role.")
        return self._order_repo.list_for_party(field, actor.id)

    def list_available_for_logistics(self, actor: Actor) -> List[Order]:
        """Unassigned ``ready`` orders, oldest first."""
        if actor.role != UserRole.LOGISTICS:
            raise AccessDeniedError("Only logistics couriers can list deliveries.")
        return self._order_repo.list(
            {"status": OrderStatus.READY, "logistics__isnull": True},
            ordering=["created_at", "id"],
        )

    def get_statistics(
        self, actor: Actor, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Producer order counts per status and delivered revenue.

        The window is the last ``ORDER_STATISTICS_WINDOW_DAYS`` days.
        """
        if actor.role != UserRole.PRODUCER:
            raise AccessDeniedError("Only producers can view order statistics.")

        end = now or timezone.now()
        start = end - timedelta(days=settings.ORDER_STATISTICS_WINDOW_DAYS)
        statistics = self._order_repo.statistics(actor.id, start, end)
        return {
            "statistics": statistics,
            "period": {"start_date": start, "end_date": end},
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock(self, order_id: str) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    @staticmethod
    def _is_acting_party(actor: Actor, order: Order) -> bool:
        field = PARTY_FIELD.get(actor.role)
        if field is None:
            return False
        party_id = getattr(order, f"{field}_id")
        return party_id is not None and str(party_id) == str(actor.id)

    def _cancel(self, order: Order, actor: Actor, reason: str) -> None:
        """Release every line and move the locked order to ``cancelled``."""
        for product_id, quantity in order.line_quantities():
            self._catalog.release(product_id, quantity)
            logger.info(
                "order.stock_released",
                order_id=str(order.id),
                product_id=product_id,
                quantity=quantity,
            )

        old_status = order.status
        order.status = OrderStatus.CANCELLED
        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                actor_id=actor.id,
                old_status=old_status,
                reason=reason,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order,
            new_status=OrderStatus.CANCELLED,
            old_status=old_status,
            actor_id=actor.id,
            actor_role=actor.role,
            notes=reason or "Order cancelled",
        )
