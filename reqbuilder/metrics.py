"""Prometheus metrics for request building."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    generate_latest,
)

LOGGER = logging.getLogger(__name__)

_REGISTRY = CollectorRegistry()


def _counter(name: str, documentation: str, *, label_names: Optional[Iterable[str]] = None) -> Counter:
    if label_names:
        return Counter(name, documentation, labelnames=list(label_names), registry=_REGISTRY)
    return Counter(name, documentation, registry=_REGISTRY)


REQUESTS_BUILT = _counter(
    "reqbuilder_requests_built_total",
    "Number of requests produced by RequestBuilder.build grouped by method.",
    label_names=["method"],
)
SIGNATURES_APPLIED = _counter(
    "reqbuilder_signatures_total",
    "Number of builds that ran a signature calculator.",
)
INFERENCE_FALLBACKS = _counter(
    "reqbuilder_inference_fallbacks_total",
    "Header values that could not be used to infer a request field.",
    label_names=["field"],
)


def record_request_built(method: str) -> None:
    REQUESTS_BUILT.labels(method=method or "UNKNOWN").inc()


def record_signature_applied() -> None:
    SIGNATURES_APPLIED.inc()


def record_inference_fallback(field: str, value: str) -> None:
    """Count a malformed header that left ``field`` unset."""

    LOGGER.debug(
        "Ignoring unusable header value for %s",
        field,
        extra={"event": "build.inference_fallback", "field": field, "value": value},
    )
    INFERENCE_FALLBACKS.labels(field=field).inc()


def metrics_payload() -> tuple[bytes, str]:
    """Return the Prometheus exposition payload and its content type."""

    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


def sample_value(name: str, labels: Optional[dict[str, str]] = None) -> float:
    value = _REGISTRY.get_sample_value(name, labels or {})
    return value or 0.0


__all__ = [
    "metrics_payload",
    "record_inference_fallback",
    "record_request_built",
    "record_signature_applied",
    "sample_value",
]
