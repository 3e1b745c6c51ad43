"""Application layer: DTOs and use cases."""
