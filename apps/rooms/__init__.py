"""Rooms app package.

Holds the hotel room inventory and day-level availability overrides the
reservation pipeline reads. Room administration happens through the Django
admin; the API only exposes read access.
"""
