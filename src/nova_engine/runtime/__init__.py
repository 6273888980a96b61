"""Runtime services: telemetry and cooperative cancellation."""

from . import telemetry
from .cancel import CancellationToken, is_cancelled

__all__ = ["telemetry", "CancellationToken", "is_cancelled"]
