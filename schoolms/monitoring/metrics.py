from typing import Dict

from prometheus_client import Counter, Histogram

from schoolms.core.config import get_settings

settings = get_settings()

# Metric objects are registered once per process in the default registry
METRIC_REGISTRY: Dict[str, object] = {}


def safe_counter(name, documentation, labelnames=()):
    if name not in METRIC_REGISTRY:
        METRIC_REGISTRY[name] = Counter(name, documentation, labelnames)
    return METRIC_REGISTRY[name]


def safe_histogram(name, documentation, labelnames=(), **kwargs):
    if name not in METRIC_REGISTRY:
        METRIC_REGISTRY[name] = Histogram(name, documentation, labelnames, **kwargs)
    return METRIC_REGISTRY[name]


# Cache Metrics
CACHE_OPERATION_LATENCY = safe_histogram(
    "cache_operation_latency_seconds",
    "Thời gian thực hiện thao tác cache",
    ["operation", "cache_type"],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1],
)

CACHE_HIT_COUNT = safe_counter("cache_hit_total", "Số lần cache hit", ["cache_type"])

CACHE_MISS_COUNT = safe_counter(
    "cache_miss_total", "Số lần cache miss", ["cache_type"]
)

CACHE_ERROR_COUNT = safe_counter(
    "cache_error_total",
    "Backend faults recovered by the cache layer",
    ["cache_type", "operation"],
)

CACHE_INVALIDATION_COUNT = safe_counter(
    "cache_invalidation_total",
    "Invalidation fan-outs triggered by writes",
    ["entity_type", "mutation"],
)


class CacheMetrics:
    """
    Thin facade over the prometheus cache collectors.

    Every tracking call is a no-op when metrics are disabled, so callers never
    need to check the flag themselves.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def track_cache_operation(
        self, operation: str, cache_type: str, hit: bool, duration: float
    ) -> None:
        """
        Theo dõi thao tác cache.

        Args:
            operation: Thao tác (get, set, delete, ...)
            cache_type: Loại cache (redis, memory)
            hit: Có tìm thấy trong cache hay không (only meaningful for get)
            duration: Thời gian thực thi (seconds)
        """
        if not self.enabled:
            return

        CACHE_OPERATION_LATENCY.labels(
            operation=operation, cache_type=cache_type
        ).observe(duration)

        if operation == "get":
            if hit:
                CACHE_HIT_COUNT.labels(cache_type=cache_type).inc()
            else:
                CACHE_MISS_COUNT.labels(cache_type=cache_type).inc()

    def track_cache_error(self, operation: str, cache_type: str) -> None:
        if self.enabled:
            CACHE_ERROR_COUNT.labels(cache_type=cache_type, operation=operation).inc()

    def track_invalidation(self, entity_type: str, mutation: str) -> None:
        if self.enabled:
            CACHE_INVALIDATION_COUNT.labels(
                entity_type=entity_type, mutation=mutation
            ).inc()


metrics = CacheMetrics(enabled=settings.METRICS_ENABLED)
