"""
Python client generator for ServiceModel.
Outputs one module with dataclass records, str-valued Enum classes, element aliases and
one client class per service that delegates every operation to a SoapTransport.
"""
import json
from typing import Dict, List, Optional, Set

from namespace_resolver import QName
from schema_model import ComplexType, ListType, SchemaModel, SimpleType, UnionType
from service_model import PortTypeOperation, ServiceModel
from generators.generator_utils import (
    NameRegistry,
    enum_member_identifier,
    field_identifier,
    method_identifier,
    type_identifier,
    RESERVED_TYPE_NAMES,
)
from generators.type_mapper import TypeMapper

DEFAULT_MODULE_NAME = "soap_client"
DEFAULT_CLIENT_NAME = "ServiceClient"
DEFAULT_SOAP_VERSION = "1.1"


class GenerationOptions:
    """
    Args:
        module_name: Name of the generated module (used in headers and the smoke test), made a valid identifier
        client_name: Overrides the class name of the first client, made a valid class name
        soap_version: "1.1" or "1.2"; None picks the version of the first port's binding
    """

    def __init__(self, module_name: str = DEFAULT_MODULE_NAME, client_name: Optional[str] = None,
                 soap_version: Optional[str] = None):
        self.module_name = field_identifier(module_name) if module_name else DEFAULT_MODULE_NAME
        self.client_name = type_identifier(client_name) if client_name else None
        self.soap_version = soap_version


class GeneratedModule:
    def __init__(self, code: str, warnings: List[str]):
        self.code = code
        self.warnings = warnings


class ClientMethod:
    def __init__(self, name: str, operation: PortTypeOperation, request_type: Optional[str],
                 response_type: Optional[str], soap_action: Optional[str]):
        self.name = name
        self.operation = operation
        self.request_type = request_type
        self.response_type = response_type
        self.soap_action = soap_action


class ClientClass:
    def __init__(self, name: str, service_name: Optional[str], endpoint_url: Optional[str],
                 soap_version: str, methods: List[ClientMethod]):
        self.name = name
        self.service_name = service_name
        self.endpoint_url = endpoint_url
        self.soap_version = soap_version
        self.methods = methods


def _py_str(value: Optional[str]) -> str:
    """Python source literal for a string (double quoted), or None."""
    if value is None:
        return "None"
    return json.dumps(value)


def _docstring(lines: List[str], indent: str) -> List[str]:
    escaped = [line.replace('\\', '\\\\').replace('"""', '\\"\\"\\"') for line in lines]
    if len(escaped) == 1:
        return [f'{indent}"""{escaped[0]}"""']
    out = [f'{indent}"""']
    out.extend(f"{indent}{line}" if line else "" for line in escaped)
    out.append(f'{indent}"""')
    return out


class PythonClientGenerator:
    """
    Plans names for every generated declaration and renders the module.
    Lookups that fail (missing messages, undefined types) never abort generation;
    they degrade to None/Any and are reported in `warnings`.
    """

    def __init__(self, model: ServiceModel, options: Optional[GenerationOptions] = None):
        self.model = model
        self.options = options or GenerationOptions()
        self.schema = model.schema or SchemaModel()
        self.mapper = TypeMapper()
        self.types = NameRegistry(reserved=RESERVED_TYPE_NAMES)
        self.warnings: List[str] = []
        self.enum_names: Dict[str, str] = {}
        self.record_names: Dict[str, str] = {}
        self.alias_names: Dict[str, str] = {}
        self.clients: List[ClientClass] = []
        self._warned_types: Set[str] = set()
        self._planned = False

    def log_warning(self, warning: str) -> None:
        if warning not in self.warnings:
            self.warnings.append(warning)

    # --- Planning -----------------------------------------------------------

    def plan(self) -> None:
        if self._planned:
            return
        for name, simple_type in self.schema.simple_types.items():
            if simple_type.enumeration_values():
                emitted = self.types.claim(type_identifier(name))
                self.enum_names[name] = emitted
                self.mapper.add_mapping(name, emitted)
        for name in self.schema.complex_types:
            emitted = self.types.claim(type_identifier(name))
            self.record_names[name] = emitted
            self.mapper.add_mapping(name, emitted)
        for name in self.schema.simple_types:
            if name not in self.enum_names:
                self.mapper.add_mapping(name, self._simple_type_mapping(name, set()))
        for name in self.schema.elements:
            candidate = type_identifier(name)
            if candidate in self.types:
                continue
            emitted = self.types.claim(candidate)
            self.alias_names[name] = emitted
        self._plan_clients()
        self._planned = True

    def _simple_type_mapping(self, name: str, seen: Set[str]) -> str:
        """Python type for a simple type that is not emitted as an Enum."""
        if name in self.enum_names:
            return self.enum_names[name]
        simple_type = self.schema.simple_types.get(name)
        if simple_type is None or name in seen:
            return "str"
        seen.add(name)
        content = simple_type.content
        if isinstance(content, ListType):
            return f"List[{self._reference_type(content.item_type, seen)}]"
        if isinstance(content, UnionType):
            return "str"
        return self._reference_type(content.base, seen)

    def _reference_type(self, qname: QName, seen: Set[str]) -> str:
        local = qname.local_name
        if local in self.schema.simple_types:
            return self._simple_type_mapping(local, seen)
        if local in self.record_names:
            return self.record_names[local]
        if self.mapper.is_builtin_type(qname):
            return self.mapper.map_type(qname)
        return "str"

    def _ensure_known(self, qname: QName, context: str) -> None:
        """Map references to types the schema does not define onto Any."""
        local = qname.local_name
        if qname.raw in self.mapper.custom_mappings or local in self.mapper.custom_mappings:
            return
        if self.mapper.is_builtin_type(qname):
            return
        if local not in self._warned_types:
            self._warned_types.add(local)
            self.log_warning(f"Type '{qname.raw}' referenced by {context} is not defined in the schema; using Any")
        self.mapper.add_mapping(local, "Any")

    def _message_type(self, message_name: Optional[QName], operation: str, direction: str) -> Optional[str]:
        if message_name is None:
            return None
        message = self.model.find_message(message_name)
        if message is None:
            self.log_warning(f"Message '{message_name.raw}' ({direction} of operation '{operation}') not found")
            return None
        part = message.first_part()
        if part is None:
            return None
        if part.element is not None:
            return self._element_type(part.element, operation, direction)
        self._ensure_known(part.type, f"message '{message.name}'")
        return self.mapper.map_type(part.type)

    def _element_type(self, element_name: QName, operation: str, direction: str) -> Optional[str]:
        """Python type of a message part declared through a top-level schema element."""
        local = element_name.local_name
        element = self.schema.elements.get(local)
        if element is not None:
            if local in self.alias_names:
                return self.alias_names[local]
            self._ensure_known(element.type, f"element '{local}'")
            return self.mapper.map_type(element.type)
        # elements with an inline type share their name with that type
        if self.schema.has_type(local):
            return self.mapper.map_type(local)
        self.log_warning(f"Element '{element_name.raw}' ({direction} of operation '{operation}') not found in schema")
        return None

    def _soap_action(self, operation_name: str) -> Optional[str]:
        actions = []
        for binding in self.model.bindings_for_operation(operation_name):
            action = binding.find_operation(operation_name).soap_action
            if action not in actions:
                actions.append(action)
        if len(actions) > 1:
            self.log_warning(
                f"Operation '{operation_name}' has different SOAP actions in different bindings; using {actions[0]!r}"
            )
        return self.model.find_soap_action(operation_name)

    def _service_operations(self, service) -> List[PortTypeOperation]:
        operations = []
        seen_port_types = set()
        for port in service.ports:
            binding = self.model.find_binding(port.binding)
            if binding is None:
                self.log_warning(f"Binding '{port.binding.raw}' of port '{port.name}' not found")
                continue
            port_type = self.model.find_port_type(binding.type)
            if port_type is None:
                self.log_warning(f"PortType '{binding.type.raw}' of binding '{binding.name}' not found")
                continue
            if port_type.name in seen_port_types:
                continue
            seen_port_types.add(port_type.name)
            operations.extend(port_type.operations)
        if not operations:
            return self.model.operations()
        return operations

    def _soap_version(self, service) -> str:
        if self.options.soap_version:
            return self.options.soap_version
        if service is not None and service.ports:
            binding = self.model.find_binding(service.ports[0].binding)
            if binding is not None:
                return binding.soap_version
        return DEFAULT_SOAP_VERSION

    def _build_client(self, class_name: str, service, operations: List[PortTypeOperation]) -> ClientClass:
        methods = []
        method_names = NameRegistry(separator='_')
        for op in operations:
            methods.append(ClientMethod(
                name=method_names.claim(method_identifier(op.name)),
                operation=op,
                request_type=self._message_type(op.input, op.name, "input"),
                response_type=self._message_type(op.output, op.name, "output"),
                soap_action=self._soap_action(op.name),
            ))
        endpoint = service.ports[0].address if service is not None and service.ports else None
        return ClientClass(
            name=class_name,
            service_name=service.name if service is not None else self.model.name,
            endpoint_url=endpoint,
            soap_version=self._soap_version(service),
            methods=methods,
        )

    def _plan_clients(self) -> None:
        if not self.model.services:
            base = self.options.client_name or (type_identifier(self.model.name) if self.model.name else DEFAULT_CLIENT_NAME)
            self.clients.append(self._build_client(self.types.claim(base), None, self.model.operations()))
            return
        for index, service in enumerate(self.model.services):
            if index == 0 and self.options.client_name:
                base = self.options.client_name
            else:
                base = type_identifier(service.name)
            self.clients.append(self._build_client(self.types.claim(base), service, self._service_operations(service)))

    # --- Rendering ----------------------------------------------------------

    def target_namespace(self) -> str:
        return self.schema.target_namespace or self.model.target_namespace or ""

    def generate(self) -> GeneratedModule:
        self.plan()
        lines: List[str] = []
        title = self.model.service_name() or self.options.module_name
        lines.extend(_docstring([
            f"Generated SOAP client for {title}.",
            "",
            "Do not edit: regenerate with wsdl_wrangler.py.",
        ], ""))
        lines.append("from __future__ import annotations")
        lines.append("")
        lines.append("from dataclasses import dataclass, field")
        lines.append("from enum import Enum")
        lines.append("from typing import Any, List, Optional, Protocol")
        lines.append("")
        lines.append(f"TARGET_NAMESPACE = {_py_str(self.target_namespace())}")
        lines.append(f"QUALIFY_CHILDREN = {self.schema.qualifies_children()}")
        lines.append("")
        lines.extend(self._render_transport())

        for name, emitted in self.enum_names.items():
            lines.append("")
            lines.extend(self._render_enum(emitted, self.schema.simple_types[name]))
        for name in self._record_order():
            lines.append("")
            lines.extend(self._render_record(self.record_names[name], self.schema.complex_types[name]))
        if self.alias_names:
            lines.append("")
            lines.append("")
            for name, emitted in self.alias_names.items():
                lines.append(self._render_alias(emitted, name))
        for client in self.clients:
            lines.append("")
            lines.extend(self._render_client(client))
        return GeneratedModule("\n".join(lines) + "\n", list(self.warnings))

    def _render_transport(self) -> List[str]:
        return [
            "",
            "class SoapTransport(Protocol):",
            '    """Sends one SOAP request and decodes the response into response_type."""',
            "",
            "    def call_with_action(",
            "        self,",
            "        operation: str,",
            "        soap_action: Optional[str],",
            "        namespace: str,",
            "        qualify_children: bool,",
            "        request: Any,",
            "        response_type: Any = None,",
            "    ) -> Any:",
            "        ...",
        ]

    def _render_enum(self, emitted: str, simple_type: SimpleType) -> List[str]:
        lines = ["", f"class {emitted}(str, Enum):"]
        members = NameRegistry(separator='_')
        seen_values = set()
        for value in simple_type.enumeration_values():
            if value in seen_values:
                continue
            seen_values.add(value)
            lines.append(f"    {members.claim(enum_member_identifier(value))} = {_py_str(value)}")
        return lines

    def _record_order(self) -> List[str]:
        """Complex type names with every resolvable base ahead of its subclasses."""
        ordered: List[str] = []
        visiting: Set[str] = set()

        def visit(name: str) -> None:
            if name in ordered or name in visiting:
                return
            visiting.add(name)
            base = self.schema.complex_types[name].base
            if base is not None and base.local_name in self.schema.complex_types:
                visit(base.local_name)
            visiting.discard(name)
            ordered.append(name)

        for name in self.schema.complex_types:
            visit(name)
        return ordered

    def _record_base(self, complex_type: ComplexType) -> Optional[str]:
        if complex_type.base is None:
            return None
        local = complex_type.base.local_name
        if local in self.record_names and local != complex_type.name:
            return self.record_names[local]
        self.log_warning(
            f"Base type '{complex_type.base.raw}' of '{complex_type.name}' is not a complex type in the schema; ignored"
        )
        return None

    def _render_record(self, emitted: str, complex_type: ComplexType) -> List[str]:
        base = self._record_base(complex_type)
        header = f"class {emitted}({base}):" if base else f"class {emitted}:"
        fields = complex_type.fields
        if not fields and base is None:
            lines = ["", "@dataclass(eq=True)", header]
            if emitted != complex_type.name:
                lines.extend(_docstring([f"Wire name: {complex_type.name}."], "    "))
                lines.append("")
            lines.extend([
                "    @classmethod",
                f"    def default(cls) -> {emitted}:",
                "        return cls()",
            ])
            return lines

        lines = ["", "@dataclass(eq=True, kw_only=True)", header]
        if emitted != complex_type.name:
            lines.extend(_docstring([f"Wire name: {complex_type.name}."], "    "))
        if not fields:
            lines.append("    pass")
            return lines
        names = NameRegistry(separator='_')
        for element in fields:
            ident = names.claim(field_identifier(element.name))
            self._ensure_known(element.type, f"field '{element.name}' of '{complex_type.name}'")
            py_type = self.mapper.map_type_with_occurs(
                element.type, element.min_occurs, element.max_occurs, element.nillable
            )
            optional = self.mapper.is_optional(element.min_occurs, element.nillable)
            if ident != element.name:
                metadata = f'metadata={{"wire_name": {_py_str(element.name)}}}'
                default = f"field(default=None, {metadata})" if optional else f"field({metadata})"
                lines.append(f"    {ident}: {py_type} = {default}")
            elif optional:
                lines.append(f"    {ident}: {py_type} = None")
            else:
                lines.append(f"    {ident}: {py_type}")
        return lines

    def _render_alias(self, emitted: str, element_name: str) -> str:
        element = self.schema.elements[element_name]
        self._ensure_known(element.type, f"element '{element_name}'")
        py_type = self.mapper.map_type_with_occurs(element.type, 1, None, element.nillable)
        return f"{emitted} = {py_type}"

    def _render_client(self, client: ClientClass) -> List[str]:
        lines = ["", f"class {client.name}:"]
        summary = f"Client for the {client.service_name} service." if client.service_name else "SOAP service client."
        lines.extend(_docstring([summary], "    "))
        lines.append("")
        lines.append(f"    ENDPOINT_URL = {_py_str(client.endpoint_url)}")
        lines.append(f"    SOAP_VERSION = {_py_str(client.soap_version)}")
        lines.append("")
        lines.append("    def __init__(self, transport: SoapTransport):")
        lines.append("        self._transport = transport")
        for method in client.methods:
            lines.append("")
            lines.extend(self._render_method(method))
        return lines

    def _render_method(self, method: ClientMethod) -> List[str]:
        op = method.operation
        request_type = method.request_type or "None"
        response_type = method.response_type or "None"
        if method.request_type is None:
            signature = f"    def {method.name}(self, request: None = None) -> {response_type}:"
        else:
            signature = f"    def {method.name}(self, request: {request_type}) -> {response_type}:"
        doc = [f"Call the {op.name} operation."]
        if op.documentation:
            doc.append("")
            doc.extend(op.documentation.splitlines())
        lines = [signature]
        lines.extend(_docstring(doc, "        "))
        lines.append("        return self._transport.call_with_action(")
        lines.append(f"            {_py_str(op.name)},")
        lines.append(f"            {_py_str(method.soap_action)},")
        lines.append("            TARGET_NAMESPACE,")
        lines.append("            QUALIFY_CHILDREN,")
        lines.append("            request,")
        lines.append(f"            response_type={response_type},")
        lines.append("        )")
        return lines


def generate_client_code(model: ServiceModel, options: Optional[GenerationOptions] = None) -> GeneratedModule:
    """Generate the client module source for a parsed service model."""
    return PythonClientGenerator(model, options).generate()


def generate_smoke_test_code(model: ServiceModel, options: Optional[GenerationOptions] = None) -> str:
    """Generate a pytest module that imports the client module and checks every client's methods."""
    generator = PythonClientGenerator(model, options)
    generator.plan()
    module = generator.options.module_name
    lines = _docstring([f"Smoke tests for the generated {module} module."], "")
    lines.append(f"import {module}")
    lines.append("")
    lines.append("")
    lines.append("def test_module_constants():")
    lines.append(f"    assert {module}.TARGET_NAMESPACE == {_py_str(generator.target_namespace())}")
    lines.append(f"    assert isinstance({module}.QUALIFY_CHILDREN, bool)")
    for client in generator.clients:
        test_name = f"test_{field_identifier(client.name)}_exposes_operations"
        method_names = ", ".join(_py_str(m.name) for m in client.methods)
        lines.append("")
        lines.append("")
        lines.append(f"def {test_name}():")
        lines.append(f"    client = {module}.{client.name}(transport=None)")
        lines.append(f"    for name in [{method_names}]:")
        lines.append("        assert callable(getattr(client, name))")
    return "\n".join(lines) + "\n"
