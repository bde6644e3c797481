"""Prometheus metrics for the bridge datastore."""

from prometheus_client import Counter, Gauge

# Collection operations (find, upsert, remove, compact)
DATASTORE_OPERATIONS = Counter(
    "slackbridge_datastore_operations_total",
    "Total number of document collection operations",
    labelnames=["collection", "operation"],
)

# Calls answered by the degradation contract instead of a real backend
DATASTORE_DEGRADED = Counter(
    "slackbridge_datastore_degraded_total",
    "Datastore calls the backend cannot serve",
    labelnames=["operation", "policy"],
)

COLLECTION_DOCUMENTS = Gauge(
    "slackbridge_collection_documents",
    "Number of live documents held by a collection",
    labelnames=["collection"],
)
