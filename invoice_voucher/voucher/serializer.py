"""
XML Serializer Module.

Converts an Element tree to Tally import XML with lxml in a single pass.
The tree is immutable and lxml output is deterministic, so serializing
the same document twice yields identical text.
"""

from lxml import etree

from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.exceptions import SerializationError
from .document import Element

logger = get_logger(__name__)


class XMLSerializer:
    """
    Serializes document trees to pretty-printed UTF-8 XML.

    Example:
        >>> serializer = XMLSerializer()
        >>> xml = serializer.serialize(build_document(voucher))
        >>> xml.splitlines()[0]
        "<?xml version='1.0' encoding='UTF-8'?>"
    """

    def __init__(self, pretty_print: bool = True, encoding: str = "UTF-8") -> None:
        self.pretty_print = pretty_print
        self.encoding = encoding

    def to_lxml(self, node: Element) -> etree._Element:
        """Convert an Element (and its subtree) to an lxml element."""
        nsmap = dict(node.namespaces) or None
        result = etree.Element(node.tag, nsmap=nsmap)
        for name, value in node.attributes:
            result.set(name, value)
        if node.text is not None:
            result.text = node.text
        for child in node.children:
            result.append(self.to_lxml(child))
        return result

    def serialize(self, document: Element) -> str:
        """
        Serialize a document to XML text.

        Args:
            document: Root element (normally ENVELOPE).

        Returns:
            XML text starting with the XML declaration.

        Raises:
            SerializationError: If a tag, attribute or text value cannot be
                represented in XML.
        """
        try:
            root = self.to_lxml(document)
            data = etree.tostring(
                root,
                pretty_print=self.pretty_print,
                xml_declaration=True,
                encoding=self.encoding
            )
        except (ValueError, TypeError, etree.LxmlError) as e:
            raise SerializationError(str(e)) from e

        xml = data.decode(self.encoding)
        logger.debug(f"Serialized <{document.tag}> ({len(xml)} chars)")
        return xml
