"""
Section parsers for WsdlParser: types, message, portType, binding and service.
Each function is entered with the parser positioned just after the START event of its
element and returns after consuming that element's END event.
"""
from typing import List, Optional
from xml.sax.saxutils import escape, quoteattr

from codegen_errors import InvalidWsdlError, MissingAttributeError
from namespace_resolver import QName, optional_qname
from schema_model import SchemaModel
from schema_parser import SchemaParser
from service_model import (
    SOAP11_BINDING_NS,
    SOAP12_BINDING_NS,
    Binding,
    BindingOperation,
    Fault,
    Message,
    MessagePart,
    Port,
    PortType,
    PortTypeOperation,
    Service,
)
from xml_events import EventKind, XmlEvent

SOAP_BINDING_NAMESPACES = (SOAP11_BINDING_NS, SOAP12_BINDING_NS)


def _require(event: XmlEvent, attribute: str, element: str, detail: Optional[str] = None) -> str:
    value = event.get(attribute)
    if not value:
        raise MissingAttributeError(element, attribute, detail)
    return value


def _is_soap_element(self, event: XmlEvent) -> bool:
    return self.namespaces.resolve(event.name) in SOAP_BINDING_NAMESPACES


def _clean_documentation(text: str) -> Optional[str]:
    lines = [line.strip() for line in text.splitlines()]
    cleaned = '\n'.join(line for line in lines if line)
    return cleaned or None


# --- types ------------------------------------------------------------------

def _serialize_schema(self, root: XmlEvent) -> str:
    """
    Re-serialize the open <schema> element as a standalone document.
    Prefixes declared elsewhere in the WSDL are copied onto the schema root so
    that QName references inside the schema still resolve.
    """
    declared = dict(root.namespaces)
    inherited = {p: uri for p, uri in self.namespaces.as_dict().items() if p not in declared}

    def open_tag(event: XmlEvent, extra_namespaces: dict) -> str:
        parts = [event.name]
        for prefix, uri in list(extra_namespaces.items()) + list(event.namespaces.items()):
            attr = f"xmlns:{prefix}" if prefix else "xmlns"
            parts.append(f"{attr}={quoteattr(uri)}")
        for key, value in event.attributes.items():
            parts.append(f"{key}={quoteattr(value)}")
        return f"<{' '.join(parts)}>"

    out = [open_tag(root, inherited)]
    depth = 1
    while depth > 0:
        event = self.next_event()
        if event.kind == EventKind.START:
            depth += 1
            out.append(open_tag(event, {}))
        elif event.kind == EventKind.END:
            depth -= 1
            out.append(f"</{event.name}>")
        elif event.kind == EventKind.TEXT:
            out.append(escape(event.text))
        else:
            break
    return ''.join(out)


def _parse_types(self, event: XmlEvent) -> Optional[SchemaModel]:
    schema = None
    for child in self.children():
        if child.local_name != "schema":
            self.skip_element()
            continue
        if schema is not None:
            self.log_warning("Multiple <schema> blocks in <types>: only the first one is used")
            self.skip_element()
            continue
        schema_text = _serialize_schema(self, child)
        self.debug_print(f"Parsing embedded schema ({len(schema_text)} characters)")
        schema_parser = SchemaParser(schema_text, self.verbose)
        schema = schema_parser.parse()
        self.warnings.extend(schema_parser.warnings)
    return schema


# --- message ----------------------------------------------------------------

def _parse_message(self, event: XmlEvent) -> Message:
    name = _require(event, "name", "message")
    parts: List[MessagePart] = []
    for child in self.children():
        if child.local_name == "part":
            part_name = child.get("name")
            element = optional_qname(child.get("element"))
            type_ref = optional_qname(child.get("type"))
            if part_name:
                if element is None and type_ref is None:
                    raise InvalidWsdlError(
                        f"Part '{part_name}' in message '{name}' must have either 'element' or 'type' attribute."
                    )
                parts.append(MessagePart(part_name, element, type_ref))
        self.skip_element()
    self.debug_print(f"Message {name}: {len(parts)} part(s)")
    return Message(name, tuple(parts))


# --- portType ---------------------------------------------------------------

def _parse_port_type_operation(self, event: XmlEvent, port_type: str) -> PortTypeOperation:
    name = _require(event, "name", "operation", f"portType '{port_type}'")
    input_message = None
    output_message = None
    faults: List[Fault] = []
    documentation = None
    for child in self.children():
        local = child.local_name
        if local == "documentation":
            documentation = _clean_documentation(self.read_text())
            continue
        if local == "input":
            input_message = optional_qname(child.get("message"))
        elif local == "output":
            output_message = optional_qname(child.get("message"))
        elif local == "fault":
            fault_name = child.get("name")
            fault_message = child.get("message")
            if fault_name and fault_message:
                faults.append(Fault(fault_name, QName(fault_message)))
        self.skip_element()
    if input_message is None and output_message is None:
        self.log_warning(f"Operation '{name}' in portType '{port_type}' has neither input nor output")
    return PortTypeOperation(name, input_message, output_message, tuple(faults), documentation)


def _parse_port_type(self, event: XmlEvent) -> PortType:
    name = _require(event, "name", "portType")
    operations = []
    for child in self.children():
        if child.local_name == "operation":
            operations.append(_parse_port_type_operation(self, child, name))
        else:
            self.skip_element()
    self.debug_print(f"PortType {name}: {len(operations)} operation(s)")
    return PortType(name, tuple(operations))


# --- binding ----------------------------------------------------------------

def _parse_binding_operation(self, event: XmlEvent, binding: str, is_soap: bool) -> Optional[BindingOperation]:
    name = event.get("name")
    soap_action = None
    style = None
    for child in self.children():
        if child.local_name == "operation" and _is_soap_element(self, child):
            soap_action = child.get("soapAction")
            style = child.get("style")
        self.skip_element()
    if not name:
        return None
    if is_soap and soap_action is None:
        self.log_warning(f"SOAP operation '{name}' in binding '{binding}' missing 'soapAction'")
    if style == "rpc":
        self.log_warning(f"Operation '{name}' in binding '{binding}' uses unsupported rpc style; generated as document style")
    return BindingOperation(name, soap_action, style)


def _parse_binding(self, event: XmlEvent) -> Optional[Binding]:
    """Parse a <binding>. Returns None for bindings that are not SOAP 1.1/1.2 bindings."""
    name = _require(event, "name", "binding")
    binding_type = QName(_require(event, "type", "binding", f"binding '{name}'"))
    transport = None
    soap_version = None
    style = None
    is_soap = False
    operations = []

    for child in self.children():
        local = child.local_name
        if local == "binding":
            uri = self.namespaces.resolve(child.name)
            if uri == SOAP11_BINDING_NS:
                is_soap = True
                if soap_version is None:
                    soap_version = "1.1"
            elif uri == SOAP12_BINDING_NS:
                is_soap = True
                soap_version = "1.2"
            if uri in SOAP_BINDING_NAMESPACES:
                transport = child.get("transport")
                style = child.get("style")
                if child.get("version"):
                    soap_version = child.get("version")
            self.skip_element()
        elif local == "operation":
            op = _parse_binding_operation(self, child, name, is_soap)
            if op is not None:
                operations.append(op)
        else:
            self.skip_element()

    if not is_soap:
        self.debug_print(f"Skipping non-SOAP binding {name}")
        return None
    if not transport:
        raise MissingAttributeError("binding", "transport", f"SOAP binding '{name}'")
    if soap_version is None:
        self.log_warning(f"SOAP binding '{name}' missing SOAP version information. Assuming default (1.1)")
        soap_version = "1.1"
    if style == "rpc":
        self.log_warning(f"Binding '{name}' uses unsupported rpc style; generated as document style")
    self.debug_print(f"Binding {name}: SOAP {soap_version}, {len(operations)} operation(s)")
    return Binding(name, binding_type, transport, soap_version, tuple(operations), style)


# --- service ----------------------------------------------------------------

def _parse_port(self, event: XmlEvent, service: str) -> Optional[Port]:
    name = _require(event, "name", "port", f"service '{service}'")
    binding = QName(_require(event, "binding", "port", f"port '{name}'"))
    address = None
    for child in self.children():
        if child.local_name == "address" and _is_soap_element(self, child):
            address = child.get("location")
        self.skip_element()
    if address is None:
        self.log_warning(f"Port '{name}' in service '{service}' has no SOAP address and was skipped")
        return None
    return Port(name, binding, address)


def _parse_service(self, event: XmlEvent) -> Service:
    name = _require(event, "name", "service")
    ports = []
    for child in self.children():
        if child.local_name == "port":
            port = _parse_port(self, child, name)
            if port is not None:
                ports.append(port)
        else:
            self.skip_element()
    self.debug_print(f"Service {name}: {len(ports)} port(s)")
    return Service(name, tuple(ports))
