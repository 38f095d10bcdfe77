# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_auth_event,
    record_enrichment,
    record_favorite_change,
    record_upstream_call,
)
from .tracing import init_tracing  # noqa: F401
