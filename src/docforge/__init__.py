"""docforge: recover structured layout analyses from unreliable model output."""

__version__ = "0.1.0"
