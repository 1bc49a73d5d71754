"""Polling loop."""

from replicawatch.scheduler.poll_scheduler import PollScheduler, Reporter

__all__ = ["PollScheduler", "Reporter"]
