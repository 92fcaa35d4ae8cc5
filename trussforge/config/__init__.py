"""Configuration for the layout optimiser."""

from .optimizer_config import (
    MemberAddingSettings,
    NumericalTolerances,
    DisplaySettings,
    OptimizerConfig,
    config,
)

__all__ = [
    "MemberAddingSettings",
    "NumericalTolerances",
    "DisplaySettings",
    "OptimizerConfig",
    "config",
]
