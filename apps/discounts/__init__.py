"""Discounts app package.

Contains the pricing engine (stay price and discount quotes), the atomic
redemption counter and the administrative operations on discount codes.
"""
