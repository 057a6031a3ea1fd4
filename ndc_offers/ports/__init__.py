"""Ports layer - Abstract interfaces (Protocols) for the engine.

Ports define the contracts between the engine core and its adapters:
- Input side: document parsing and reading
- Output side: request rendering and the host's pricing gateway
- Seat solving, swappable for alternative assignment strategies
"""

from .document import DocumentParserPort, DocumentReaderPort, Element
from .gateway import PriceGatewayPort
from .rendering import RequestRendererPort
from .seating import SeatSolverPort

__all__ = [
    # Document
    "Element",
    "DocumentReaderPort",
    "DocumentParserPort",
    # Seating
    "SeatSolverPort",
    # Rendering
    "RequestRendererPort",
    # Gateway
    "PriceGatewayPort",
]
