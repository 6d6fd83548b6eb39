"""Environment and feed settings."""
