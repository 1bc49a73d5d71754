"""Controllers module for replicawatch.

This module provides the controllers that collect workload replica counts
from a Kubernetes cluster.
"""

from __future__ import annotations

# Base classes
from replicawatch.controllers.base import (
    AsyncControllerMixin,
    BaseController,
)

# Cluster domain
from replicawatch.controllers.cluster.controller import ClusterController

__all__ = [
    "AsyncControllerMixin",
    "BaseController",
    "ClusterController",
]
