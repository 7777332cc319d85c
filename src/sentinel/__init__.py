"""Sentinel - PHP code quality checks."""

try:
    from importlib.metadata import version

    __version__ = version("sentinel-php")
except Exception:
    __version__ = "0.0.0.dev0+local"  # Fallback for development
