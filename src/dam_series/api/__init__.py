"""FastAPI surface over the series service."""
