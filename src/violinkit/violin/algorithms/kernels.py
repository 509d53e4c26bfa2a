"""
Kernel window functions for density estimation: pure numpy.

Each kernel carries its window function (normalized to integrate to 1 over
its support) and the constant used by Silverman's rule-of-thumb for that
kernel. Kernels are resolved once through KERNELS (Kernel enum -> KernelSpec).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

import numpy as np

from violinkit.violin.settings import Kernel

ArrayLike = Union[float, np.ndarray]

_GAUSSIAN_NORM = 1.0 / np.sqrt(2.0 * np.pi)


def epanechnikov(u: ArrayLike) -> np.ndarray:
    u = np.asarray(u, dtype=float)
    return np.where(np.abs(u) <= 1.0, 0.75 * (1.0 - u * u), 0.0)


def gaussian(u: ArrayLike) -> np.ndarray:
    u = np.asarray(u, dtype=float)
    return _GAUSSIAN_NORM * np.exp(-0.5 * u * u)


def quartic(u: ArrayLike) -> np.ndarray:
    u = np.asarray(u, dtype=float)
    t = 1.0 - u * u
    return np.where(np.abs(u) <= 1.0, (15.0 / 16.0) * t * t, 0.0)


@dataclass(frozen=True)
class KernelSpec:
    """A kernel window function and its Silverman scale factor."""

    kernel: Kernel
    factor: float
    window: Callable[[ArrayLike], np.ndarray]


KERNELS: dict[Kernel, KernelSpec] = {
    Kernel.EPANECHNIKOV: KernelSpec(Kernel.EPANECHNIKOV, 2.3449, epanechnikov),
    Kernel.GAUSSIAN: KernelSpec(Kernel.GAUSSIAN, 1.059, gaussian),
    Kernel.QUARTIC: KernelSpec(Kernel.QUARTIC, 2.7779, quartic),
}


def get_kernel(kernel: Kernel) -> KernelSpec:
    """Return the KernelSpec for a Kernel enum member.

    Raises:
        ValueError: If kernel is not a Kernel member.
    """
    if not isinstance(kernel, Kernel):
        raise ValueError(f"kernel must be a Kernel enum member, got {kernel!r}")
    return KERNELS[kernel]
