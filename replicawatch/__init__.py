"""replicawatch - observed replica counts of one workload across every namespace."""

__version__ = "0.1.0"
