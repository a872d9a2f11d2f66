"""HTTP surface for the image chat gateway (FastAPI)."""
