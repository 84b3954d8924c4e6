"""Carts app package.

A guest collects prospective stays in a single active cart, applies a
discount code and checks out, which hands the cart to the payment ledger.
"""
