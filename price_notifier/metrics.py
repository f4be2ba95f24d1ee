"""
Prometheus counters for the pipeline stages
"""
from prometheus_client import Counter

CHANGE_EVENTS_PUBLISHED = Counter(
    "price_change_events_published_total",
    "Price change events enqueued by the publisher"
)

HISTORY_RECORDS_APPENDED = Counter(
    "price_history_records_appended_total",
    "History records appended by the history consumer"
)

DUPLICATE_CHANGE_EVENTS = Counter(
    "price_change_events_duplicate_total",
    "Redelivered change events whose history record already existed"
)

ALERTS_EMITTED = Counter(
    "price_alerts_emitted_total",
    "Alert events enqueued after crossing the significance threshold",
    ["alert_type"]
)

NOTIFICATIONS = Counter(
    "price_alert_notifications_total",
    "Per-recipient notification outcomes",
    ["status"]
)

MALFORMED_MESSAGES = Counter(
    "price_pipeline_malformed_messages_total",
    "Undeserializable messages dropped to the dead-letter queue",
    ["queue"]
)
