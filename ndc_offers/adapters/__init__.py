"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces:
- Document parsing (lxml)
- Seat assignment (tiered solver)
- Request rendering (OfferPrice XML)

The pricing gateway is supplied by the host application.
"""
