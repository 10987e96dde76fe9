"""Runtime configuration: action settings, configured inputs and event data."""

from .config_loader import load_event, load_inputs
from .settings import ActionSettings

__all__ = ["ActionSettings", "load_event", "load_inputs"]
