"""Event management backend: events, ticket inventory and bookings."""

__version__ = "1.0.0"
