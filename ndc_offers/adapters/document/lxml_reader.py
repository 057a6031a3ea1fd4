"""lxml document reader adapter.

Searches are namespace-agnostic: every lookup matches on the local tag
name with an XPath ``local-name()`` predicate, so the same normalizers
work whether or not the upstream payload declares a default namespace.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from lxml import etree

from ...domain.errors import DocumentParseError
from ...ports.document import Element

_DESCENDANTS = etree.XPath(".//*[local-name()=$tag]")


def _text(element: Optional[Element]) -> Optional[str]:
    if element is None:
        return None
    text = "".join(element.itertext()).strip()
    return text or None


@dataclass
class LxmlDocumentReader:
    """DocumentReaderPort implementation over an lxml element tree.

    Attributes:
        document: The root element
    """

    document: Element

    @property
    def root(self) -> Element:
        return self.document

    def _scope(self, parent: Optional[Element]) -> Element:
        return self.document if parent is None else parent

    def get_elements(self, parent: Optional[Element], tag: str) -> List[Element]:
        return list(_DESCENDANTS(self._scope(parent), tag=tag))

    def get_element(self, parent: Optional[Element], tag: str) -> Optional[Element]:
        matches = _DESCENDANTS(self._scope(parent), tag=tag)
        return matches[0] if matches else None

    def get_text(self, parent: Optional[Element], tag: str) -> Optional[str]:
        return _text(self.get_element(parent, tag))

    def get_attribute(self, element: Optional[Element], name: str) -> Optional[str]:
        if element is None:
            return None
        value = element.get(name)
        if value is None:
            for key, candidate in element.attrib.items():
                if etree.QName(key).localname == name:
                    value = candidate
                    break
        if value is None:
            return None
        return value.strip() or None

    def text_of(self, element: Optional[Element]) -> Optional[str]:
        return _text(element)


@dataclass
class LxmlDocumentParser:
    """DocumentParserPort implementation.

    Entity expansion and network access are disabled on the parser.
    """

    _parser: etree.XMLParser = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
        )

    def parse(self, payload: Union[str, bytes]) -> LxmlDocumentReader:
        """Parse a payload into a reader.

        Args:
            payload: XML text or bytes.

        Returns:
            A reader rooted at the document element.

        Raises:
            DocumentParseError: If the payload is empty or malformed.
        """
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        if not payload or not payload.strip():
            raise DocumentParseError("Empty document", source="payload")

        try:
            root = etree.fromstring(payload, parser=self._parser)
        except etree.XMLSyntaxError as e:
            self._logger.error(
                "Malformed document",
                extra={"error": str(e), "size": len(payload)},
            )
            raise DocumentParseError("Malformed document", source="payload", cause=e)

        self._logger.debug(
            "Parsed document",
            extra={"root": etree.QName(root).localname, "size": len(payload)},
        )
        return LxmlDocumentReader(root)
