"""HTTP layer for the Prefscale backend (FastAPI)."""
