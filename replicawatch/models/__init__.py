"""Data models for replicawatch."""
