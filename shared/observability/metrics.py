from prometheus_client import Counter

# Business Metrics
storefront_orders_created_total = Counter(
    "storefront_orders_created_total",
    "Total order submissions processed",
    ["outcome"] # Labels: 'success', 'not_found', 'invalid_variant', 'insufficient_stock'
)

storefront_order_status_transitions_total = Counter(
    "storefront_order_status_transitions_total",
    "Total order status changes appended to history",
    ["status"]
)

storefront_stock_conflicts_total = Counter(
    "storefront_stock_conflicts_total",
    "Conditional stock decrements that matched no row at commit time"
)

storefront_registrations_total = Counter(
    "storefront_registrations_total",
    "Total user accounts created",
    ["source"] # Labels: 'local', 'external', 'rider'
)

storefront_logins_total = Counter(
    "storefront_logins_total",
    "Total login attempts",
    ["outcome"] # Labels: 'success', 'invalid_credentials', 'pending_approval'
)
