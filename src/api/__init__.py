"""FastAPI application module for PeerRec.

This module contains the FastAPI application, route handlers, and API
endpoints for querying recommendations and tracking user interactions.
"""
