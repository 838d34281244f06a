from .table import Table, build_table, player_labels
from .deals import (
    Deal,
    DealBatch,
    enumerate_deals,
    enumerate_batches,
    estimate_enumeration_size,
    sample_deal,
    simulate_deals,
)
from .equity import (
    EquityResult,
    EquityTally,
    merge_results,
    enumerate_equity,
    simulate_equity,
)

__all__ = [
    "Table",
    "build_table",
    "player_labels",
    "Deal",
    "DealBatch",
    "enumerate_deals",
    "enumerate_batches",
    "estimate_enumeration_size",
    "sample_deal",
    "simulate_deals",
    "EquityResult",
    "EquityTally",
    "merge_results",
    "enumerate_equity",
    "simulate_equity",
]
