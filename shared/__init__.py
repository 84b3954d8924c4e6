"""
Shared Kernel

Base classes and utilities shared across the reservation contexts: domain
events, value objects, the error taxonomy, the unit of work and the
message bus.
"""
