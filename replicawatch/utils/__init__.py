"""Utility helpers for replicawatch."""
