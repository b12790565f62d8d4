"""
FastAPI application exposing the scan target validator.

Modules in this package provide request/response schemas and the ASGI app
itself (`api.main:app`).
"""

__all__ = ["main", "schemas"]
