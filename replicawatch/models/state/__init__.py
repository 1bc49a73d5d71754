"""Run configuration models."""
