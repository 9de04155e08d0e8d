"""Weather Reports service: station observations and per-station statistics."""

__version__ = "1.0.0"
