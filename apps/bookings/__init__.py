"""Bookings app package.

Rooms, reservations and the restriction ledger that decides availability.
Services (availability engine, reservation workflow, calendar projection)
are wired around a pluggable store and attached to each request by
``BookingServicesMiddleware``.
"""
