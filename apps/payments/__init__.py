"""Payments app package.

Holds the payment ledger: the signed purchase request handed to the PayWay
gateway, callback verification, the payment status machine and settlement
of paid carts into confirmed bookings.
"""
