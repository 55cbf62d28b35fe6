"""
Relational Operators Module
"""
from .relational import (
    AggregateFunction,
    Aggregation,
    group_aggregate,
    having,
    join,
    lag_within_partition,
    rank_within_partition,
    round_half_away,
    safe_divide,
    top_n,
)

__all__ = [
    "AggregateFunction",
    "Aggregation",
    "group_aggregate",
    "having",
    "join",
    "lag_within_partition",
    "rank_within_partition",
    "round_half_away",
    "safe_divide",
    "top_n",
]
