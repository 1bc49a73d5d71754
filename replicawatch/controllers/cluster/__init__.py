"""Init file for cluster module."""

from replicawatch.controllers.cluster.fetchers import (
    NamespaceFetcher,
    ResourceFetcher,
)
from replicawatch.controllers.cluster.parsers import WorkloadParser

__all__ = ["NamespaceFetcher", "ResourceFetcher", "WorkloadParser"]
