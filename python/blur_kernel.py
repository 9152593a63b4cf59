import logging
import math
import sys
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.signal import windows

logger = logging.getLogger(__name__)

TWO_PI = 2 * math.acos(-1)


def _is_normal(value: float) -> bool:
    return math.isfinite(value) and abs(value) >= sys.float_info.min


def _fits_float64(variance: float) -> bool:
    """Both denominators and the exponent scale must be normal doubles."""
    variance_sq = variance * variance
    denom = TWO_PI * variance_sq
    return (_is_normal(2 * variance_sq)
            and _is_normal(denom)
            and _is_normal(1 / denom)
            and _is_normal(math.sqrt(TWO_PI) * variance))


class KernelError(ValueError):
    pass


class InvalidSizeError(KernelError):

    def __init__(self, value, reason: str, name: str = "blur-size") -> None:
        self.value = value
        self.name = name
        super().__init__(f"<{name}> {reason} not `{value}`.")


class InvalidVarianceError(KernelError):

    def __init__(self, value,
                 reason: str = "should be a finite number greater than 0") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"<blur-variance> {reason} not `{value}`.")


@dataclass(frozen=True)
class KernelSpec:
    size: int
    variance: float

    def __post_init__(self) -> None:
        if isinstance(self.size, bool) or not isinstance(self.size, (int, np.integer)):
            raise InvalidSizeError(self.size, "should be an integer")
        if self.size <= 0:
            raise InvalidSizeError(self.size, "should be greater than 0")
        if self.size % 2 == 0:
            raise InvalidSizeError(self.size, "must be an odd number")
        try:
            variance = float(self.variance)
        except (TypeError, ValueError):
            raise InvalidVarianceError(self.variance) from None
        if not math.isfinite(variance) or variance <= 0:
            raise InvalidVarianceError(self.variance)
        if not _fits_float64(variance):
            raise InvalidVarianceError(self.variance, "is out of range for a float64 kernel")
        object.__setattr__(self, "size", int(self.size))
        object.__setattr__(self, "variance", variance)

    @classmethod
    def from_radius(cls, radius: int, variance: float) -> "KernelSpec":
        """Radius counts the center, so radius r gives a (2r - 1) wide kernel."""
        if isinstance(radius, bool) or not isinstance(radius, (int, np.integer)):
            raise InvalidSizeError(radius, "should be an integer", name="blur-radius")
        if radius <= 0:
            raise InvalidSizeError(radius, "should be greater than 0", name="blur-radius")
        return cls(2 * int(radius) - 1, variance)

    @property
    def half(self) -> int:
        return self.size // 2


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class GaussianKernel:
    """Everything derived from one (size, variance) pair.

    ``kernel`` and ``normalized`` are indexed ``[y + half, x + half]`` and
    ``weights`` is indexed ``[x + half]``. All arrays are read-only.
    """

    spec: KernelSpec
    kernel: np.ndarray
    total: float
    normalized: np.ndarray
    weights: np.ndarray
    weights_total: float

    @property
    def size(self) -> int:
        return self.spec.size

    @property
    def half(self) -> int:
        return self.spec.half

    @property
    def offsets(self) -> range:
        return range(-self.half, self.half + 1)

    def at(self, x: int, y: int) -> float:
        if abs(x) > self.half or abs(y) > self.half:
            raise IndexError(f"offset ({x}, {y}) outside kernel of size {self.size}")
        return float(self.kernel[y + self.half, x + self.half])

    @property
    def normalized_weights(self) -> np.ndarray:
        return self.weights / self.weights_total

    def separability_error(self) -> float:
        w = self.normalized_weights
        return float(np.max(np.abs(self.normalized - np.outer(w, w))))


def gaussian_kernel_2d(size: int, variance: float):
    half = size // 2
    two_variance_sq = 2 * variance**2
    denom = TWO_PI * variance**2
    kernel = np.zeros((size, size))
    total = 0.0
    # row-major accumulation keeps the total reproducible
    for y in range(-half, half + 1):
        for x in range(-half, half + 1):
            value = math.exp(-(x**2 + y**2) / two_variance_sq) / denom
            kernel[y + half, x + half] = value
            total += value

    return kernel, total


def gaussian_kernel_1d(size: int, variance: float):
    half = size // 2
    two_variance_sq = 2 * variance**2
    denom = math.sqrt(TWO_PI) * variance
    weights = np.zeros(size)
    total = 0.0
    for x in range(-half, half + 1):
        value = math.exp(-x**2 / two_variance_sq) / denom
        weights[x + half] = value
        total += value

    return weights, total


def generate_from_spec(spec: KernelSpec) -> GaussianKernel:
    kernel, total = gaussian_kernel_2d(spec.size, spec.variance)
    normalized = kernel / total
    weights, weights_total = gaussian_kernel_1d(spec.size, spec.variance)
    logger.debug("size=%d variance=%r total=%r weights_total=%r",
                 spec.size, spec.variance, total, weights_total)

    return GaussianKernel(spec=spec,
                          kernel=_readonly(kernel),
                          total=total,
                          normalized=_readonly(normalized),
                          weights=_readonly(weights),
                          weights_total=weights_total)


def generate(size: int, variance: float) -> GaussianKernel:
    return generate_from_spec(KernelSpec(size, variance))


def separable_reference(size: int, variance: float) -> np.ndarray:
    """Normalized kernel built as the outer product of scipy's gaussian window."""
    spec = KernelSpec(size, variance)
    kernel_1d = windows.gaussian(spec.size, std=spec.variance)
    kernel = kernel_1d.reshape(-1, 1) * kernel_1d
    kernel /= kernel.sum()
    return kernel


def weights_table(kernel: GaussianKernel) -> pd.DataFrame:
    diagonal = np.diagonal(kernel.kernel)
    normalized_diagonal = np.diagonal(kernel.normalized)
    table = pd.DataFrame({
        "raw": diagonal,
        "raw_sqrt": np.sqrt(diagonal),
        "normalized": normalized_diagonal,
        "normalized_sqrt": np.sqrt(normalized_diagonal),
        "gaussian_1d": kernel.weights,
        "gaussian_1d_normalized": kernel.normalized_weights,
    }, index=pd.Index(list(kernel.offsets), name="offset"))
    return table
