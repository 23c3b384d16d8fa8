"""Distribution history service exports."""

from .history import (
    DistributionFilters,
    DistributionPage,
    ResolvedDistribution,
    get_distribution,
    list_distributions,
    parse_date_bound,
)

__all__ = [
    "DistributionFilters",
    "DistributionPage",
    "ResolvedDistribution",
    "get_distribution",
    "list_distributions",
    "parse_date_bound",
]
