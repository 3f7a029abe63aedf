"""HTTP boundary - FastAPI gateway and the service it drives."""
