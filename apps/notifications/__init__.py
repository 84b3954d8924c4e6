"""Notifications app package.

Fire-and-forget e-mail to guests about their bookings and payments. Domain
events from the message bus are turned into Celery tasks; delivery failures
are logged and never reach the reservation flow.
"""
