"""
xml_events.py
Forward-only XML event source used by the WSDL and schema parsers.

The document is tokenized with lxml.etree.iterparse and flattened into a stream of
START / END / TEXT / EOF events. Element and attribute names are reported the way
they were written in the document ("prefix:local"), namespace declarations are
attached to the START event of the element that declares them. An empty element
(<a/>) is reported as a START immediately followed by its END.
"""
import io
import re
from enum import Enum
from typing import Callable, Dict, Iterator, Optional, Union

from lxml import etree

from codegen_errors import XmlParseError

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

_XML_DECLARATION = re.compile(r'^\s*<\?xml[^>]*\?>')


class EventKind(Enum):
    START = "start"
    END = "end"
    TEXT = "text"
    EOF = "eof"


class XmlEvent:
    __slots__ = ('kind', 'name', 'attributes', 'namespaces', 'text', 'line')

    def __init__(
        self,
        kind: EventKind,
        name: Optional[str] = None,
        attributes: Optional[Dict[str, str]] = None,
        namespaces: Optional[Dict[str, str]] = None,
        text: Optional[str] = None,
        line: Optional[int] = None,
    ):
        self.kind = kind
        self.name = name
        self.attributes = attributes or {}
        self.namespaces = namespaces or {}
        self.text = text
        self.line = line

    @property
    def local_name(self) -> Optional[str]:
        if self.name is None:
            return None
        return self.name.rsplit(':', 1)[-1]

    def get(self, attribute: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(attribute, default)

    def __repr__(self):
        if self.kind == EventKind.TEXT:
            return f"XmlEvent(TEXT, {self.text!r})"
        return f"XmlEvent({self.kind.name}, {self.name!r})"


def _raw_name(clark_name: str, nsmap: Dict[Optional[str], str]) -> str:
    """Turn '{uri}local' back into 'prefix:local' using the in-scope declarations."""
    if not clark_name.startswith('{'):
        return clark_name
    uri, local = clark_name[1:].split('}', 1)
    if uri == XML_NAMESPACE:
        return f"xml:{local}"
    for prefix, bound_uri in nsmap.items():
        if prefix and bound_uri == uri:
            return f"{prefix}:{local}"
    return local


def _element_name(element) -> str:
    local = etree.QName(element).localname
    if element.prefix:
        return f"{element.prefix}:{local}"
    return local


def _leading_text(element) -> Optional[str]:
    previous = element.getprevious()
    if previous is not None:
        return previous.tail
    parent = element.getparent()
    if parent is not None:
        return parent.text
    return None


def _trailing_text(element) -> Optional[str]:
    if len(element):
        return element[-1].tail
    return element.text


def _as_source(xml: Union[str, bytes]) -> io.BytesIO:
    if isinstance(xml, str):
        # The text is already decoded; an encoding declaration would contradict the UTF-8 bytes fed to lxml.
        xml = _XML_DECLARATION.sub('', xml, count=1).encode('utf-8')
    return io.BytesIO(xml)


def iter_xml_events(xml: Union[str, bytes]) -> Iterator[XmlEvent]:
    """
    Tokenize an XML document into XmlEvents. The last event is always EOF.
    Raises XmlParseError when the document is not well-formed.
    """
    pending_namespaces: Dict[str, str] = {}
    context = etree.iterparse(
        _as_source(xml),
        events=("start", "end", "start-ns"),
        remove_comments=True,
        remove_pis=True,
        resolve_entities=False,
        no_network=True,
    )
    try:
        for action, item in context:
            if action == "start-ns":
                prefix, uri = item
                pending_namespaces[prefix or ""] = uri
                continue
            if not isinstance(item.tag, str):
                continue
            if action == "start":
                text = _leading_text(item)
                if text:
                    yield XmlEvent(EventKind.TEXT, text=text)
                nsmap = item.nsmap
                attributes = {_raw_name(key, nsmap): value for key, value in item.attrib.items()}
                yield XmlEvent(
                    EventKind.START,
                    name=_element_name(item),
                    attributes=attributes,
                    namespaces=pending_namespaces,
                    line=item.sourceline,
                )
                pending_namespaces = {}
            else:
                text = _trailing_text(item)
                if text:
                    yield XmlEvent(EventKind.TEXT, text=text)
                yield XmlEvent(EventKind.END, name=_element_name(item), line=item.sourceline)
    except etree.XMLSyntaxError as e:
        raise XmlParseError(f"XML parsing error: {e}") from e
    yield XmlEvent(EventKind.EOF)


class EventReader:
    """
    Cursor over an XmlEvent stream. Sub-parsers receive the reader positioned just
    after the START event of the element they handle and leave it positioned just
    after that element's END event.
    """

    def __init__(self, xml: Union[str, bytes], on_start: Optional[Callable[[XmlEvent], None]] = None):
        """
        Args:
            xml: The document
            on_start: Called with every START event the reader hands out or skips over
        """
        self._events = iter_xml_events(xml)
        self._done = False
        self._on_start = on_start

    def next_event(self) -> XmlEvent:
        if self._done:
            return XmlEvent(EventKind.EOF)
        event = next(self._events)
        if event.kind == EventKind.EOF:
            self._done = True
        elif event.kind == EventKind.START and self._on_start is not None:
            self._on_start(event)
        return event

    def skip_element(self) -> None:
        """Consume the rest of the currently open element, nested children included."""
        depth = 1
        while depth > 0:
            event = self.next_event()
            if event.kind == EventKind.START:
                depth += 1
            elif event.kind == EventKind.END:
                depth -= 1
            elif event.kind == EventKind.EOF:
                return

    def read_text(self) -> str:
        """Consume the rest of the currently open element and return all text it contains."""
        parts = []
        depth = 1
        while depth > 0:
            event = self.next_event()
            if event.kind == EventKind.TEXT:
                parts.append(event.text)
            elif event.kind == EventKind.START:
                depth += 1
            elif event.kind == EventKind.END:
                depth -= 1
            elif event.kind == EventKind.EOF:
                break
        return ''.join(parts)
