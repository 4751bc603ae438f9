"""
Configuration management for pga_screw.

Provides the numeric configuration (tolerances, default dtype and device)
and the interpolation defaults, plus a process-wide default instance that
the library consults whenever a caller passes ``None``.
"""

import json
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
from pathlib import Path

import torch

from ..core.constants import EPSILON, EPSILON2, DEFAULT_DTYPE, DEFAULT_KENLERP_BETA


@dataclass
class Config:
    """
    Configuration for pga_screw computations.

    Attributes:
        # Tolerances
        epsilon: Linear tolerance for approximate-zero tests
        epsilon2: Squared tolerance for approximate-zero tests on squares

        # Tensors
        dtype: Name of the default floating dtype ('float32', 'float64')
        device: Default device for factories ('cpu', 'cuda', ...)

        # Interpolation
        shortest_path: Default for Rotor.slerp when None is passed
        kenlerp_beta: Default blend weight for kenlerp when None is passed
    """

    # Tolerances
    epsilon: float = EPSILON
    epsilon2: float = EPSILON2

    # Tensors
    dtype: str = str(DEFAULT_DTYPE).replace('torch.', '')
    device: str = 'cpu'

    # Interpolation
    shortest_path: bool = False
    kenlerp_beta: float = DEFAULT_KENLERP_BETA

    # Additional fields
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def torch_dtype(self) -> torch.dtype:
        """The configured dtype as a torch.dtype."""
        dtype = getattr(torch, self.dtype, None)
        if not isinstance(dtype, torch.dtype):
            raise ValueError(f"Unknown dtype '{self.dtype}'")
        return dtype

    def factory_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for torch factory functions."""
        return {'dtype': self.torch_dtype, 'device': torch.device(self.device)}

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'Config':
        """Create config from dictionary."""
        # Extract known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        known_kwargs = {k: v for k, v in config_dict.items() if k in known_fields}
        extra_kwargs = {k: v for k, v in config_dict.items() if k not in known_fields}

        config = cls(**known_kwargs)
        config.extra = {**config.extra, **extra_kwargs}
        return config

    def update(self, **kwargs) -> 'Config':
        """Return a new config with updated values."""
        config_dict = self.to_dict()
        config_dict.update(kwargs)
        return Config.from_dict(config_dict)


_config = Config()


def get_config() -> Config:
    """Return the process-wide default configuration."""
    return _config


def set_config(config: Optional[Config]) -> Config:
    """
    Replace the process-wide default configuration.

    Args:
        config: New configuration, or None to restore the defaults

    Returns:
        The previous configuration, so callers can restore it
    """
    global _config
    previous = _config
    _config = config if config is not None else Config()
    return previous


def load_config(filepath: str) -> Config:
    """
    Load configuration from JSON file.

    Args:
        filepath: Path to JSON config file

    Returns:
        Config object
    """
    filepath = Path(filepath)
    with open(filepath, 'r') as f:
        config_dict = json.load(f)
    return Config.from_dict(config_dict)


def save_config(config: Config, filepath: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: Config object to save
        filepath: Output file path
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
