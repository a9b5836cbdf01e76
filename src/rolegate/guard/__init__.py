"""
Route guard - navigation and session consumer.
"""

from .route_guard import RouteGuard

__all__ = ["RouteGuard"]
