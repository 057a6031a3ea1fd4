"""Document adapters - Implementations of the document ports.

Available implementations:
- LxmlDocumentParser: Parses XML payloads with lxml
- LxmlDocumentReader: Namespace-agnostic reads over an lxml tree
"""

from .lxml_reader import LxmlDocumentParser, LxmlDocumentReader

__all__ = ["LxmlDocumentParser", "LxmlDocumentReader"]
