"""AssetSync - local workspace mirror for versioned remote task assets."""

__version__ = "0.1.0"
