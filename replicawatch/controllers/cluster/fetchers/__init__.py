"""Fetchers for cluster controller."""

from replicawatch.controllers.cluster.fetchers.namespace_fetcher import NamespaceFetcher
from replicawatch.controllers.cluster.fetchers.resource_fetcher import ResourceFetcher

__all__ = ["NamespaceFetcher", "ResourceFetcher"]
