"""
wsdl_parser.py
Core logic for WsdlParser: event loop over the document and dispatch to the section parsers.

Usage:
    parser = WsdlParser(open("service.wsdl").read(), verbose=True)
    model = parser.parse()
    for warning in parser.warnings:
        print(warning)
"""
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from namespace_resolver import NamespaceTable
from service_model import ServiceModel
from xml_events import EventKind, EventReader, XmlEvent

from wsdl_parser_sections import (
    _parse_binding,
    _parse_message,
    _parse_port_type,
    _parse_service,
    _parse_types,
)


class WsdlElement(Enum):
    """Top-level WSDL elements the parser understands. Everything else is UNKNOWN."""
    DEFINITIONS = "definitions"
    TYPES = "types"
    MESSAGE = "message"
    PORT_TYPE = "portType"
    BINDING = "binding"
    SERVICE = "service"
    UNKNOWN = "unknown"

    @classmethod
    def from_local_name(cls, local_name: Optional[str]) -> 'WsdlElement':
        for kind in cls:
            if kind.value == local_name:
                return kind
        return cls.UNKNOWN


class WsdlParser:
    """
    Parser for WSDL 1.1 documents.
    Produces a ServiceModel; fatal problems raise CodegenError subclasses,
    everything else is reported through `warnings`.
    """

    def __init__(self, xml_text: str, verbose: bool = False):
        """
        Args:
            xml_text: The WSDL document
            verbose: Whether to print debug information (default: False)
        """
        self.xml_text = xml_text
        self.verbose = verbose
        self.warnings: List[str] = []
        self.namespaces = NamespaceTable()
        self.reader: Optional[EventReader] = None

    def debug_print(self, message: str) -> None:
        if self.verbose:
            print(f"[DEBUG] {message}")

    def log_warning(self, warning: str) -> None:
        """Add a warning to the warnings list, echoing it in verbose mode."""
        self.warnings.append(warning)
        if self.verbose:
            print(f"[WARNING] {warning}")

    def _record_namespaces(self, event: XmlEvent) -> None:
        if event.namespaces:
            self.namespaces.record_all(event.namespaces)

    def next_event(self) -> XmlEvent:
        return self.reader.next_event()

    def children(self) -> Iterator[XmlEvent]:
        """
        Yield the START event of each direct child of the open element, stopping after
        the element's END. Each child must be consumed completely before the next one is requested.
        """
        while True:
            event = self.next_event()
            if event.kind == EventKind.START:
                yield event
            elif event.kind in (EventKind.END, EventKind.EOF):
                return

    def skip_element(self) -> None:
        self.reader.skip_element()

    def read_text(self) -> str:
        return self.reader.read_text()

    def parse(self) -> ServiceModel:
        """
        Parse the document and return the resulting service model.
        Raises XmlParseError for malformed XML and WsdlParseError/XsdParseError for invalid content.
        """
        self.warnings = []
        self.namespaces = NamespaceTable()
        self.reader = EventReader(self.xml_text, on_start=self._record_namespaces)

        name = None
        target_namespace = None
        schema = None
        messages = []
        port_types = []
        bindings = []
        services = []

        while True:
            event = self.next_event()
            if event.kind == EventKind.EOF:
                break
            if event.kind != EventKind.START:
                continue
            kind = WsdlElement.from_local_name(event.local_name)
            if kind == WsdlElement.DEFINITIONS:
                name = event.get("name")
                target_namespace = event.get("targetNamespace")
                self.debug_print(f"Definitions name={name!r} targetNamespace={target_namespace!r}")
            elif kind == WsdlElement.TYPES:
                parsed = _parse_types(self, event)
                if schema is None:
                    schema = parsed
                elif parsed is not None:
                    self.log_warning("Additional <types> section ignored")
            elif kind == WsdlElement.MESSAGE:
                messages.append(_parse_message(self, event))
            elif kind == WsdlElement.PORT_TYPE:
                port_types.append(_parse_port_type(self, event))
            elif kind == WsdlElement.BINDING:
                binding = _parse_binding(self, event)
                if binding is not None:
                    bindings.append(binding)
            elif kind == WsdlElement.SERVICE:
                services.append(_parse_service(self, event))

        model = ServiceModel(
            name=name,
            target_namespace=target_namespace,
            namespaces=self.namespaces.as_dict(),
            messages=tuple(messages),
            port_types=tuple(port_types),
            bindings=tuple(bindings),
            services=tuple(services),
            schema=schema,
        )
        self.debug_print(f"Parsed {model!r}")
        return model


def parse_wsdl(xml_text: str, verbose: bool = False) -> Tuple[ServiceModel, List[str]]:
    parser = WsdlParser(xml_text, verbose)
    model = parser.parse()
    return model, parser.warnings
