"""
Numerical settings for the curve kernel.

All tolerances, sample counts and iteration budgets used by the iterative
algorithms live in a single KernelConfig. Curves take an optional config;
when omitted they use the active (module-level) config.

Example JSON file accepted by load_config:

    {
      "arc_length_samples_per_span": 32,
      "closest_point_max_iter": 100,
      "tessellation_max_depth": 18
    }

Keys not listed in the file keep their default values.
"""

import json
import logging
from dataclasses import dataclass, asdict, fields, replace as dc_replace
from typing import Dict, Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KernelConfig:
    """
    Tolerances and budgets for curve queries.

    Attributes:
        eps: Parametric tolerance (domain checks, zero-length spans)
        tangent_eps: Minimum |C'(u)| for a defined tangent
        quadrature_points: Gauss-Legendre points per integration panel
        quadrature_tol: Absolute error target for adaptive integration
        quadrature_max_depth: Maximum panel bisection depth
        arc_length_samples_per_span: Arc-length table samples per knot span
        inverse_tol: Length residual tolerance for param_at_length
        inverse_max_iter: Iteration budget for param_at_length
        closest_point_samples_per_span: Coarse samples per knot span
        closest_point_tol: Distance/step tolerance for the Newton refinement
        closest_point_cos_tol: Zero-cosine tolerance for the Newton refinement
        closest_point_max_iter: Iteration budget for the Newton refinement
        tessellation_max_depth: Maximum bisection depth per initial interval
    """
    eps: float = 1e-10
    tangent_eps: float = 1e-12
    quadrature_points: int = 8
    quadrature_tol: float = 1e-12
    quadrature_max_depth: int = 20
    arc_length_samples_per_span: int = 16
    inverse_tol: float = 1e-10
    inverse_max_iter: int = 50
    closest_point_samples_per_span: int = 16
    closest_point_tol: float = 1e-12
    closest_point_cos_tol: float = 1e-12
    closest_point_max_iter: int = 50
    tessellation_max_depth: int = 16

    def __post_init__(self):
        self._validate()

    def _validate(self):
        for name in ("eps", "tangent_eps", "quadrature_tol",
                     "inverse_tol", "closest_point_tol", "closest_point_cos_tol"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("quadrature_points", "arc_length_samples_per_span",
                     "closest_point_samples_per_span", "inverse_max_iter",
                     "closest_point_max_iter"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        for name in ("quadrature_max_depth", "tessellation_max_depth"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    def replace(self, **changes) -> 'KernelConfig':
        """Return a copy with some fields changed."""
        return dc_replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'KernelConfig':
        """
        Build a config from a mapping, rejecting unknown keys.

        Parameters:
            values: Mapping of field name -> value

        Returns:
            KernelConfig with defaults for missing keys
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**values)


_active_config = KernelConfig()


def get_config() -> KernelConfig:
    """Return the active kernel configuration."""
    return _active_config


def set_config(config: KernelConfig) -> KernelConfig:
    """
    Replace the active kernel configuration.

    Curves created before the call keep the config they were built with.

    Returns:
        The previously active config
    """
    global _active_config
    if not isinstance(config, KernelConfig):
        raise TypeError("config must be a KernelConfig")
    previous = _active_config
    _active_config = config
    return previous


def load_config(filename: str) -> KernelConfig:
    """
    Load a kernel configuration from a JSON file.

    Parameters:
        filename: Path to a JSON object of KernelConfig fields

    Returns:
        KernelConfig (not activated; pass it to set_config to do so)
    """
    with open(filename, 'r', encoding='utf-8') as f:
        values = json.load(f)
    if not isinstance(values, dict):
        raise ValueError(f"Config file {filename} must contain a JSON object")
    config = KernelConfig.from_dict(values)
    logger.info(f"Loaded kernel config from {filename}")
    return config
