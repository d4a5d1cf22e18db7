from schoolms.cache.strategies.event_based import (
    InvalidationCoordinator,
    Mutation,
    MutationContext,
    base_rule,
)

__all__ = ["InvalidationCoordinator", "Mutation", "MutationContext", "base_rule"]
