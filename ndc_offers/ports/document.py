"""Document reader port - Abstraction over the XML tree.

Normalizers never touch the parser library directly. They walk the
document through four primitives, all of which search descendants by
local tag name and ignore namespaces.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Union

# Opaque node handle owned by the reader implementation.
Element = Any


class DocumentReaderPort(Protocol):
    """Port for reading a parsed document.

    Implementation: adapters/document/lxml_reader.py

    Every ``parent`` argument accepts None, meaning the document root.
    """

    @property
    def root(self) -> Element:
        """The document element."""
        ...

    def get_elements(self, parent: Optional[Element], tag: str) -> Sequence[Element]:
        """All descendants of ``parent`` named ``tag``, in document order."""
        ...

    def get_element(self, parent: Optional[Element], tag: str) -> Optional[Element]:
        """First descendant named ``tag``, or None."""
        ...

    def get_text(self, parent: Optional[Element], tag: str) -> Optional[str]:
        """Stripped text of the first descendant named ``tag``.

        Returns:
            The text, or None when the element is missing or empty.
        """
        ...

    def get_attribute(self, element: Optional[Element], name: str) -> Optional[str]:
        """Attribute value by local name, or None."""
        ...

    def text_of(self, element: Optional[Element]) -> Optional[str]:
        """Stripped text content of ``element`` itself, or None."""
        ...


class DocumentParserPort(Protocol):
    """Port for turning a raw payload into a reader."""

    def parse(self, payload: Union[str, bytes]) -> DocumentReaderPort:
        """Parse a payload.

        Raises:
            DocumentParseError: If the payload is not well-formed.
        """
        ...
