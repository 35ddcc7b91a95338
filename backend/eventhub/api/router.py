"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from eventhub.api.routes import auth, bookings, categories, events, tags, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
# Before events: /events/categories must not be read as /events/{event_id}
api_router.include_router(categories.router)
api_router.include_router(events.router)
api_router.include_router(bookings.router)
api_router.include_router(tags.router)
api_router.include_router(users.router)
