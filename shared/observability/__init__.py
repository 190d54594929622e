from .setup import setup_observability
from .metrics import (
    storefront_orders_created_total,
    storefront_order_status_transitions_total,
    storefront_stock_conflicts_total,
    storefront_registrations_total,
    storefront_logins_total,
)
