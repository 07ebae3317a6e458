"""
model_debug.py
Summary, structural dump and JSON dump utilities for parsed WSDL models.
"""
import os
import json
from enum import Enum
from typing import Any, List

from namespace_resolver import QName
from schema_model import ListType, RestrictionType, UnionType
from service_model import ServiceModel


def _default_encoder(obj):
    if isinstance(obj, QName):
        return obj.raw
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, '__dict__'):
        return obj.__dict__
    return str(obj)


def model_to_json(model: Any) -> str:
    return json.dumps(model, indent=2, default=_default_encoder)


def model_summary(model: ServiceModel) -> str:
    """Short overview used by the `info` command."""
    lines = []
    lines.append(f"Service: {model.service_name() or '(unnamed)'}")
    lines.append(f"Target namespace: {model.target_namespace or '(none)'}")
    lines.append(f"Messages: {len(model.messages)}")
    lines.append(f"Port types: {len(model.port_types)}")
    lines.append(f"Operations: {len(model.operations())}")
    versions = sorted({b.soap_version for b in model.bindings})
    version_info = f" (SOAP {', '.join(versions)})" if versions else ""
    lines.append(f"Bindings: {len(model.bindings)}{version_info}")
    lines.append(f"Services: {len(model.services)}")
    endpoint = model.endpoint_url()
    if endpoint:
        lines.append(f"Endpoint: {endpoint}")
    schema = model.schema
    if schema is not None:
        lines.append(
            f"Schema: {len(schema.complex_types)} complex type(s), "
            f"{len(schema.simple_types)} simple type(s), {len(schema.elements)} element(s)"
        )
    else:
        lines.append("Schema: (none)")
    return "\n".join(lines)


def _occurs(min_occurs, max_occurs) -> str:
    upper = max_occurs if max_occurs is not None else "1"
    return f"[{min_occurs}..{upper}]"


def model_details(model: ServiceModel, indent: int = 0) -> str:
    """
    Structural dump of a ServiceModel, one line per node.
    """
    lines: List[str] = []

    def add_line(s):
        lines.append(s)

    ind = '  ' * indent
    add_line(f"{ind}ServiceModel (name={model.name!r}, targetNamespace={model.target_namespace!r})")

    if model.namespaces:
        add_line(f"{ind}  Namespaces:")
        for prefix, uri in model.namespaces.items():
            add_line(f"{ind}    {prefix or '(default)'} = {uri}")

    if model.messages:
        add_line(f"{ind}  Messages:")
        for message in model.messages:
            add_line(f"{ind}    Message: {message.name}")
            for part in message.parts:
                ref = f"element={part.element}" if part.element is not None else f"type={part.type}"
                add_line(f"{ind}      Part: {part.name} ({ref})")

    if model.port_types:
        add_line(f"{ind}  Port types:")
        for port_type in model.port_types:
            add_line(f"{ind}    PortType: {port_type.name}")
            for op in port_type.operations:
                add_line(f"{ind}      Operation: {op.name} (input={op.input}, output={op.output})")
                for fault in op.faults:
                    add_line(f"{ind}        Fault: {fault.name} (message={fault.message})")
                if op.documentation:
                    doc = op.documentation.replace('\n', ' ')
                    add_line(f"{ind}        Doc: {doc[:60]}{'...' if len(doc) > 60 else ''}")

    if model.bindings:
        add_line(f"{ind}  Bindings:")
        for binding in model.bindings:
            style = f", style={binding.style}" if binding.style else ""
            add_line(f"{ind}    Binding: {binding.name} (type={binding.type}, SOAP {binding.soap_version}{style})")
            add_line(f"{ind}      Transport: {binding.transport}")
            for op in binding.operations:
                add_line(f"{ind}      Operation: {op.name} (soapAction={op.soap_action!r})")

    if model.services:
        add_line(f"{ind}  Services:")
        for service in model.services:
            add_line(f"{ind}    Service: {service.name}")
            for port in service.ports:
                add_line(f"{ind}      Port: {port.name} (binding={port.binding}, address={port.address})")

    schema = model.schema
    if schema is not None:
        add_line(f"{ind}  Schema (targetNamespace={schema.target_namespace!r}, elementFormDefault={schema.element_form_default!r}):")
        for name, complex_type in schema.complex_types.items():
            base = f" extends {complex_type.base}" if complex_type.base is not None else ""
            add_line(f"{ind}    ComplexType: {name}{base}")
            for element in complex_type.fields:
                nillable = " nillable" if element.nillable else ""
                add_line(f"{ind}      {element.name}: {element.type} {_occurs(element.min_occurs, element.max_occurs)}{nillable}")
        for name, simple_type in schema.simple_types.items():
            content = simple_type.content
            if isinstance(content, RestrictionType):
                values = content.enumeration_values()
                detail = f"restriction of {content.base}"
                if values:
                    detail += f", enumeration={values}"
            elif isinstance(content, ListType):
                detail = f"list of {content.item_type}"
            elif isinstance(content, UnionType):
                detail = f"union of {[str(m) for m in content.member_types]}"
            else:
                detail = "?"
            add_line(f"{ind}    SimpleType: {name} ({detail})")
        for name, element in schema.elements.items():
            add_line(f"{ind}    Element: {name} (type={element.type})")

    return "\n".join(lines)


def debug_print_model(model: ServiceModel, indent=0, file_path=None, out_dir="./generated"):
    """
    Print the structural dump, or write it to file_path (relative paths go under out_dir).
    """
    output = model_details(model, indent)
    if file_path is not None:
        if not os.path.isabs(file_path):
            file_path = os.path.join(out_dir, file_path)
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Model details written to {file_path}")
    else:
        print(output)
