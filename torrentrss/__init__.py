"""Release feed pseudo download client."""

__version__ = "0.1.0"
