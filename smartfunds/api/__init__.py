"""HTTP API for the mission engine (FastAPI)."""
