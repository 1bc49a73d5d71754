"""Base controller classes."""

from replicawatch.controllers.base.base_controller import (
    AsyncControllerMixin,
    BaseController,
)

__all__ = ["AsyncControllerMixin", "BaseController"]
