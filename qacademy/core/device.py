"""Device abstraction for state-vector storage."""

from __future__ import annotations

import torch


class Device:
    """
    A logical simulation device: an underlying PyTorch device plus dtypes.

    Instances are treated as immutable once constructed.
    """

    def __init__(
        self,
        name: str,
        torch_device: torch.device,
        dtype: torch.dtype = torch.float64,
        complex_dtype: torch.dtype = torch.complex128,
    ) -> None:
        """
        Initialize a Device.

        Args:
            name: Logical device name ("sv_cpu" or "sv_cuda").
            torch_device: Underlying PyTorch device.
            dtype: Floating-point dtype for probabilities.
            complex_dtype: Complex dtype for amplitudes.
        """
        self.name = name
        self.torch_device = torch_device
        self.dtype = dtype
        self.complex_dtype = complex_dtype

    def __repr__(self) -> str:
        return (
            f"Device(name={self.name!r}, torch_device={self.torch_device}, "
            f"complex_dtype={self.complex_dtype})"
        )

    def as_torch_device(self) -> torch.device:
        """Return the underlying PyTorch device."""
        return self.torch_device


def device(name: str) -> Device:
    """
    Create a Device from its name.

    Supported names:
        - "sv_cpu": CPU state vector
        - "sv_cuda": CUDA state vector (only if CUDA is available)

    Raises:
        RuntimeError: If "sv_cuda" is requested but CUDA is not available.
        ValueError: If the name is not supported.
    """
    if name == "sv_cpu":
        return Device(name="sv_cpu", torch_device=torch.device("cpu"))
    elif name == "sv_cuda":
        if not torch.cuda.is_available():
            raise RuntimeError(
                "CUDA device requested but torch.cuda.is_available() is False"
            )
        return Device(name="sv_cuda", torch_device=torch.device("cuda"))
    else:
        supported = ["sv_cpu", "sv_cuda"]
        raise ValueError(
            f"Unsupported device name: {name!r}. Supported devices: {supported}"
        )


def default_device() -> Device:
    """Return the default CPU state-vector device."""
    return device("sv_cpu")


def resolve_device(spec: Device | str | torch.device | None) -> Device:
    """
    Normalize any accepted device specification to a Device.

    Args:
        spec: Device instance, device name, torch.device, or None for the
            default device.

    Raises:
        ValueError: For unsupported names or torch device types.
        TypeError: For any other input type.
    """
    if spec is None:
        return default_device()
    if isinstance(spec, Device):
        return spec
    if isinstance(spec, str):
        return device(spec)
    if isinstance(spec, torch.device):
        if spec.type == "cpu":
            return device("sv_cpu")
        if spec.type == "cuda":
            return device("sv_cuda")
        raise ValueError(
            f"Unsupported torch.device type: {spec.type}. "
            "Only 'cpu' and 'cuda' are supported."
        )
    raise TypeError(
        f"device must be Device, str, torch.device, or None, got {type(spec)}"
    )
