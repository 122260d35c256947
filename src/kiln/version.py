"""Single source of truth for the kiln version string."""

__version__: str = "1.4.0"
