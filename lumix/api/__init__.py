"""HTTP API: FastAPI app, routes and middleware."""
