"""Core value types and device handling."""

from .amplitude import Amplitude
from .device import Device, default_device, device, resolve_device

__all__ = ["Amplitude", "Device", "device", "default_device", "resolve_device"]
