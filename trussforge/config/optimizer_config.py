"""
Configuration settings for layout optimisation.

This module contains the tunable constants of the member-adding heuristic,
the numerical tolerances used when interpreting LP solutions, and display
settings for the derived result geometry.
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class MemberAddingSettings:
    """Parameters of the adaptive member-adding loop."""

    VIOLATION_THRESHOLD: float = 0.1  # Normalised virtual strain above 1.0
    MAX_MEMBERS_ADDED: int = 0  # Per iteration, 0 = unlimited
    MAX_ITERATIONS: int = 100  # Upper bound for a single run()

    def __post_init__(self):
        """Validate member-adding settings."""
        if self.VIOLATION_THRESHOLD < 0:
            raise ValueError("VIOLATION_THRESHOLD must be non-negative")
        if self.MAX_MEMBERS_ADDED < 0:
            raise ValueError("MAX_MEMBERS_ADDED must be non-negative")
        if self.MAX_ITERATIONS <= 0:
            raise ValueError("MAX_ITERATIONS must be positive")


@dataclass
class NumericalTolerances:
    """Tolerances applied to LP solutions and input geometry."""

    ZERO_AREA_TOL: float = 1e-6  # |force| / capacity below this is absent
    RADIUS_TOL: float = 1e-6  # Bars at or below this radius are not drawn
    NODE_MATCH_TOL: float = 1e-9  # Coordinate match for potential nodes

    def __post_init__(self):
        """Validate tolerances."""
        if self.ZERO_AREA_TOL <= 0:
            raise ValueError("ZERO_AREA_TOL must be positive")
        if self.RADIUS_TOL <= 0:
            raise ValueError("RADIUS_TOL must be positive")
        if self.NODE_MATCH_TOL < 0:
            raise ValueError("NODE_MATCH_TOL must be non-negative")


@dataclass
class DisplaySettings:
    """Settings for bar geometry handed to the display collaborator."""

    LINE_WEIGHT_SCALE: float = 5.0  # Pixels per unit radius
    MIN_LINE_WEIGHT: int = 1

    def __post_init__(self):
        """Validate display settings."""
        if self.LINE_WEIGHT_SCALE <= 0:
            raise ValueError("LINE_WEIGHT_SCALE must be positive")
        if self.MIN_LINE_WEIGHT < 1:
            raise ValueError("MIN_LINE_WEIGHT must be at least 1")


class OptimizerConfig:
    """Global configuration for layout optimisation."""

    def __init__(self):
        self.member_adding = MemberAddingSettings()
        self.tolerances = NumericalTolerances()
        self.display = DisplaySettings()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "member_adding": self.member_adding.__dict__,
            "tolerances": self.tolerances.__dict__,
            "display": self.display.__dict__,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "OptimizerConfig":
        """Create configuration from dictionary."""
        instance = cls()

        # Update and validate member-adding settings
        if "member_adding" in config_dict:
            new_settings = MemberAddingSettings()
            for k, v in config_dict["member_adding"].items():
                if hasattr(new_settings, k):
                    setattr(new_settings, k, v)
            new_settings.__post_init__()  # Validate
            instance.member_adding = new_settings

        # Update and validate tolerances
        if "tolerances" in config_dict:
            new_tolerances = NumericalTolerances()
            for k, v in config_dict["tolerances"].items():
                if hasattr(new_tolerances, k):
                    setattr(new_tolerances, k, v)
            new_tolerances.__post_init__()  # Validate
            instance.tolerances = new_tolerances

        # Update and validate display settings
        if "display" in config_dict:
            new_display = DisplaySettings()
            for k, v in config_dict["display"].items():
                if hasattr(new_display, k):
                    setattr(new_display, k, v)
            new_display.__post_init__()  # Validate
            instance.display = new_display

        return instance

    def validate(self):
        """Validate entire configuration."""
        self.member_adding.__post_init__()
        self.tolerances.__post_init__()
        self.display.__post_init__()


# Default configuration instance
config = OptimizerConfig()
config.validate()  # Ensure default configuration is valid
