"""Top-level package for the NDC offer engine.

The engine normalizes airline shopping and seat availability documents,
reconciles a-la-carte bundles to flight offers, assigns seats, and
builds, renders and prices OfferPrice requests. Transport is left to
the host through PriceGatewayPort.
"""
