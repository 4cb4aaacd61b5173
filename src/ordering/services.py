"""Composition root: builds every checkout service with its collaborators.

Nothing in the core reaches for a module-level instance. The web app
builds one ``StorefrontServices`` at startup; tests build their own with
fakes.
"""

import os
from dataclasses import dataclass

from notifications.channel import build_email_channel
from notifications.notifier import EmailOrderNotifier, OrderNotifier
from ordering.address.address import AddressBook
from ordering.cart.aggregator import CartAggregator
from ordering.cart.guest_store import build_guest_store
from ordering.cart.storage import CartStorage, PersistedCartStorage
from ordering.catalogue.reader import CatalogueReader, RepositoryCatalogueReader
from ordering.checkout.orchestrator import CheckoutOrchestrator
from ordering.checkout.payment_callback import PaymentCallbackProcessor
from ordering.checkout.shipping import ShippingRateTable
from ordering.inventory.guard import InventoryGuard
from ordering.order.state_machine import OrderStateMachine
from ordering.order.tracking import OrderQueries
from ordering.promo.evaluator import PromoEvaluator
from payments.gateway import build_gateway
from payments.gateway.port import PaymentGateway


@dataclass
class StorefrontServices:
    carts: CartAggregator
    promos: PromoEvaluator
    inventory: InventoryGuard
    orders: OrderStateMachine
    order_queries: OrderQueries
    checkout: CheckoutOrchestrator
    payment_callbacks: PaymentCallbackProcessor
    gateway: PaymentGateway
    storefront_url: str = ""


def build_services(
    gateway: PaymentGateway | None = None,
    guest_store: CartStorage | None = None,
    notifier: OrderNotifier | None = None,
    catalogue: CatalogueReader | None = None,
    promos: PromoEvaluator | None = None,
    shipping_rates: ShippingRateTable | None = None,
    storefront_url: str | None = None,
) -> StorefrontServices:
    """Wire the services. Anything not passed in is built from the environment."""
    storefront_url = storefront_url if storefront_url is not None else os.getenv("STOREFRONT_URL", "")
    gateway = gateway or build_gateway()
    notifier = notifier or EmailOrderNotifier(build_email_channel(), storefront_url=storefront_url)

    catalogue = catalogue or RepositoryCatalogueReader()
    carts = CartAggregator(
        catalogue=catalogue,
        persisted=PersistedCartStorage(),
        guest=guest_store if guest_store is not None else build_guest_store(),
    )
    promos = promos or PromoEvaluator()
    inventory = InventoryGuard(catalogue)
    orders = OrderStateMachine(notifier)

    return StorefrontServices(
        carts=carts,
        promos=promos,
        inventory=inventory,
        orders=orders,
        order_queries=OrderQueries(),
        checkout=CheckoutOrchestrator(
            carts=carts,
            promos=promos,
            inventory=inventory,
            addresses=AddressBook(),
            gateway=gateway,
            orders=orders,
            shipping_rates=shipping_rates,
        ),
        payment_callbacks=PaymentCallbackProcessor(
            gateway=gateway,
            inventory=inventory,
            orders=orders,
            carts=carts,
        ),
        gateway=gateway,
        storefront_url=storefront_url,
    )
