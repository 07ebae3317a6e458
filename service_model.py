"""
service_model.py
Parsed representation of a WSDL 1.1 document: messages, port types, SOAP bindings and services.
Built once by WsdlParser and treated as read-only afterwards.
"""
from typing import List, Optional, Tuple, Union

from namespace_resolver import QName

SOAP11_BINDING_NS = "http://schemas.xmlsoap.org/wsdl/soap/"
SOAP12_BINDING_NS = "http://schemas.xmlsoap.org/wsdl/soap12/"


def _local(name: Union[str, QName, None]) -> Optional[str]:
    if name is None:
        return None
    if isinstance(name, QName):
        return name.local_name
    return name.rsplit(':', 1)[-1]


class MessagePart:
    def __init__(self, name: str, element: Optional[QName] = None, type: Optional[QName] = None):
        self.name = name
        self.element = element
        self.type = type

    def __repr__(self):
        return f"MessagePart(name={self.name!r}, element={self.element!r}, type={self.type!r})"


class Message:
    def __init__(self, name: str, parts: Tuple[MessagePart, ...] = ()):
        self.name = name
        self.parts = tuple(parts)

    def first_part(self) -> Optional[MessagePart]:
        return self.parts[0] if self.parts else None

    def __repr__(self):
        return f"Message(name={self.name!r}, parts={len(self.parts)})"


class Fault:
    def __init__(self, name: str, message: Optional[QName]):
        self.name = name
        self.message = message


class PortTypeOperation:
    def __init__(
        self,
        name: str,
        input: Optional[QName] = None,
        output: Optional[QName] = None,
        faults: Tuple[Fault, ...] = (),
        documentation: Optional[str] = None,
    ):
        self.name = name
        self.input = input
        self.output = output
        self.faults = tuple(faults)
        self.documentation = documentation

    def __repr__(self):
        return f"PortTypeOperation(name={self.name!r}, input={self.input!r}, output={self.output!r})"


class PortType:
    def __init__(self, name: str, operations: Tuple[PortTypeOperation, ...] = ()):
        self.name = name
        self.operations = tuple(operations)


class BindingOperation:
    def __init__(self, name: str, soap_action: Optional[str] = None, style: Optional[str] = None):
        self.name = name
        self.soap_action = soap_action
        self.style = style

    def __repr__(self):
        return f"BindingOperation(name={self.name!r}, soap_action={self.soap_action!r})"


class Binding:
    def __init__(
        self,
        name: str,
        type: QName,
        transport: str,
        soap_version: str = "1.1",
        operations: Tuple[BindingOperation, ...] = (),
        style: Optional[str] = None,
    ):
        self.name = name
        self.type = type
        self.transport = transport
        self.soap_version = soap_version
        self.operations = tuple(operations)
        self.style = style

    def find_operation(self, name: str) -> Optional[BindingOperation]:
        for op in self.operations:
            if op.name == name:
                return op
        return None

    def __repr__(self):
        return f"Binding(name={self.name!r}, type={self.type!r}, soap_version={self.soap_version!r})"


class Port:
    def __init__(self, name: str, binding: QName, address: str):
        self.name = name
        self.binding = binding
        self.address = address


class Service:
    def __init__(self, name: str, ports: Tuple[Port, ...] = ()):
        self.name = name
        self.ports = tuple(ports)


class ServiceModel:
    """
    Root of the service model. `schema` holds the parsed embedded schema, if the
    document had one.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        target_namespace: Optional[str] = None,
        namespaces: Optional[dict] = None,
        messages: Tuple[Message, ...] = (),
        port_types: Tuple[PortType, ...] = (),
        bindings: Tuple[Binding, ...] = (),
        services: Tuple[Service, ...] = (),
        schema=None,
    ):
        self.name = name
        self.target_namespace = target_namespace
        self.namespaces = dict(namespaces or {})
        self.messages = tuple(messages)
        self.port_types = tuple(port_types)
        self.bindings = tuple(bindings)
        self.services = tuple(services)
        self.schema = schema

    def service_name(self) -> Optional[str]:
        if self.name:
            return self.name
        service = self.first_service()
        return service.name if service else None

    def operations(self) -> List[PortTypeOperation]:
        return [op for port_type in self.port_types for op in port_type.operations]

    def find_message(self, name: Union[str, QName, None]) -> Optional[Message]:
        local = _local(name)
        for message in self.messages:
            if message.name == local:
                return message
        return None

    def find_binding(self, name: Union[str, QName, None]) -> Optional[Binding]:
        local = _local(name)
        for binding in self.bindings:
            if binding.name == local:
                return binding
        return None

    def find_port_type(self, name: Union[str, QName, None]) -> Optional[PortType]:
        local = _local(name)
        for port_type in self.port_types:
            if port_type.name == local:
                return port_type
        return None

    def first_service(self) -> Optional[Service]:
        return self.services[0] if self.services else None

    def endpoint_url(self) -> Optional[str]:
        service = self.first_service()
        if service is None or not service.ports:
            return None
        return service.ports[0].address

    def find_soap_action(self, operation_name: str) -> Optional[str]:
        """SOAP action of the first binding operation with this name, in document order."""
        for binding in self.bindings:
            op = binding.find_operation(operation_name)
            if op is not None:
                return op.soap_action
        return None

    def bindings_for_operation(self, operation_name: str) -> List[Binding]:
        return [b for b in self.bindings if b.find_operation(operation_name) is not None]

    def __repr__(self):
        return (
            f"ServiceModel(name={self.name!r}, messages={len(self.messages)}, "
            f"port_types={len(self.port_types)}, bindings={len(self.bindings)}, services={len(self.services)})"
        )
