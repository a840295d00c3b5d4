"""
XML-to-JSON transformer for VEC files.

Folds an XML document into an immutable node tree that serializes to the
JSON structure expected by the AAS generator:

- element attributes under ``@attributes``
- child elements keyed by tag name, a single value for the first occurrence
  and a list once the tag repeats
- trimmed, non-empty text under ``#text`` (the last non-empty text wins)
"""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Union

from app.exceptions import ParseError

logger = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

ATTRIBUTES_KEY = "@attributes"
TEXT_KEY = "#text"


@dataclass(frozen=True)
class Single:
    node: ParsedNode


@dataclass(frozen=True)
class Many:
    nodes: tuple[ParsedNode, ...]


@dataclass(frozen=True)
class Text:
    value: str


Member = Union[Single, Many, Text]


@dataclass(frozen=True)
class ParsedNode:
    """
    One XML element folded into JSON form.

    ``members`` keeps child tags and text in document order of their first
    occurrence.
    """

    attributes: tuple[tuple[str, str], ...] = ()
    members: tuple[tuple[str, Member], ...] = ()

    def get(self, name: str) -> Member | None:
        for key, member in self.members:
            if key == name:
                return member
        return None

    @property
    def text(self) -> str | None:
        member = self.get(TEXT_KEY)
        return member.value if isinstance(member, Text) else None

    def children(self, name: str) -> list[ParsedNode]:
        """All child nodes for a tag, regardless of single/many folding."""
        member = self.get(name)
        if isinstance(member, Single):
            return [member.node]
        if isinstance(member, Many):
            return list(member.nodes)
        return []

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.attributes:
            result[ATTRIBUTES_KEY] = dict(self.attributes)
        for key, member in self.members:
            if isinstance(member, Single):
                result[key] = member.node.to_json()
            elif isinstance(member, Many):
                result[key] = [node.to_json() for node in member.nodes]
            else:
                result[key] = member.value
        return result


class _QualifiedNames:
    """Maps ElementTree's ``{uri}local`` names back to ``prefix:local``."""

    def __init__(self) -> None:
        # The xml prefix is bound implicitly and never reported as start-ns
        self.prefixes: dict[str, str] = {XML_NAMESPACE: "xml"}

    def register(self, prefix: str, uri: str) -> None:
        self.prefixes.setdefault(uri, prefix)

    def qualify(self, name: str) -> str:
        if not name.startswith("{"):
            return name
        uri, _, local = name[1:].partition("}")
        prefix = self.prefixes.get(uri, "")
        return f"{prefix}:{local}" if prefix else local


class XmlToJsonTransformer:
    """Pure XML-to-JSON folding over ElementTree."""

    def transform(self, xml: str | bytes) -> ParsedNode:
        """
        Parse an XML document into a ParsedNode tree.

        Args:
            xml: Document text, or raw bytes honoring the XML declaration's encoding

        Returns:
            The folded root element

        Raises:
            ParseError: If the input is not well-formed XML or its declared
                encoding cannot be decoded
        """
        source = io.BytesIO(xml) if isinstance(xml, bytes) else io.StringIO(xml)
        names = _QualifiedNames()
        declarations: dict[ET.Element, list[tuple[str, str]]] = {}
        pending: list[tuple[str, str]] = []

        try:
            # Keep comments and PIs in the tree so they split text nodes
            builder = ET.TreeBuilder(insert_comments=True, insert_pis=True)
            parser = ET.XMLParser(target=builder)
            events = ET.iterparse(source, events=("start-ns", "start"), parser=parser)
            for event, item in events:
                if event == "start-ns":
                    prefix, uri = item
                    names.register(prefix, uri)
                    pending.append((prefix, uri))
                elif pending:
                    declarations[item] = pending
                    pending = []
            root = events.root
        except (ET.ParseError, ValueError) as e:
            raise ParseError(f"Malformed XML: {e}") from e

        if root is None:
            raise ParseError("Document has no root element")

        return self._fold(root, names, declarations)

    def transform_to_json(self, xml: str | bytes) -> dict[str, Any]:
        return self.transform(xml).to_json()

    def _fold(
        self,
        element: ET.Element,
        names: _QualifiedNames,
        declarations: dict[ET.Element, list[tuple[str, str]]],
    ) -> ParsedNode:
        """Recursively fold an element and its children."""
        attributes: dict[str, str] = {}
        for prefix, uri in declarations.get(element, []):
            attributes[f"xmlns:{prefix}" if prefix else "xmlns"] = uri
        for name, value in element.attrib.items():
            attributes[names.qualify(name)] = value

        members: dict[str, Member] = {}
        self._add_text(members, element.text)

        for child in element:
            # Comments and processing instructions are not elements
            if not isinstance(child.tag, str):
                self._add_text(members, child.tail)
                continue

            tag = names.qualify(child.tag)
            node = self._fold(child, names, declarations)
            existing = members.get(tag)
            if isinstance(existing, Single):
                members[tag] = Many((existing.node, node))
            elif isinstance(existing, Many):
                members[tag] = Many(existing.nodes + (node,))
            else:
                members[tag] = Single(node)

            self._add_text(members, child.tail)

        return ParsedNode(
            attributes=tuple(attributes.items()),
            members=tuple(members.items()),
        )

    @staticmethod
    def _add_text(members: dict[str, Member], text: str | None) -> None:
        if text is None:
            return
        value = text.strip()
        if value:
            members[TEXT_KEY] = Text(value)
