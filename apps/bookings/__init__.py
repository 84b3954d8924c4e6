"""Bookings app package.

Owns the booking lifecycle: the status state machine, the availability
index that prevents double booking, direct bookings and the confirmed
bookings created when a paid cart settles.
"""
