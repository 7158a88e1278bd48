"""
Pydantic schema definitions.

Each domain (accounts, bookings, payments, messaging, ...) defines its
stored entity model alongside the request payloads the API accepts for
it.  Entities share the ``Entity`` base from ``schemas.entity``.
"""
