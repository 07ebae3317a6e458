"""
schema_parser.py
Parser for the XML Schema embedded in a WSDL <types> section.

Handles the subset of XSD that maps onto generated records and enums: top-level
elements, complex types with sequence/all content (plus complexContent extension),
and simple types built by restriction, list or union.
"""
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from codegen_errors import XsdParseError
from namespace_resolver import QName
from schema_model import (
    INTEGER_FACETS,
    ComplexType,
    Facet,
    FacetKind,
    ListType,
    RestrictionType,
    SchemaElement,
    SchemaModel,
    Sequence,
    SequenceElement,
    SimpleType,
    UnionType,
)
from xml_events import EventKind, EventReader, XmlEvent

DEFAULT_SIMPLE_BASE = "xs:string"
ANY_TYPE = "xs:anyType"

# Content models that are recognised but not turned into fields.
UNSUPPORTED_COMPLEX_CONTENT = {
    "choice", "attribute", "anyAttribute", "simpleContent", "any", "group", "attributeGroup",
}


class SchemaElementKind(Enum):
    ELEMENT = "element"
    COMPLEX_TYPE = "complexType"
    SIMPLE_TYPE = "simpleType"
    UNKNOWN = "unknown"

    @classmethod
    def from_local_name(cls, local_name: str) -> 'SchemaElementKind':
        for kind in cls:
            if kind.value == local_name:
                return kind
        return cls.UNKNOWN


def _parse_min_occurs(value: Optional[str]) -> int:
    if value is None:
        return 1
    try:
        return int(value)
    except ValueError:
        return 1


class SchemaParser:
    """
    Builds a SchemaModel from the text of a single <xs:schema> document.
    Non-fatal problems are collected in `warnings`.
    """

    def __init__(self, xml_text: str, verbose: bool = False):
        self.xml_text = xml_text
        self.verbose = verbose
        self.warnings: List[str] = []
        self.reader: Optional[EventReader] = None
        self.model: Optional[SchemaModel] = None
        # anonymous type name -> (fallback name, fields typed by it, owning top-level element)
        self._anonymous: Dict[str, Tuple[str, List[SequenceElement], Optional[str]]] = {}
        self._refs: List[SequenceElement] = []
        self._pending: Set[str] = set()

    def debug_print(self, message: str) -> None:
        if self.verbose:
            print(f"[DEBUG] {message}")

    def log_warning(self, warning: str) -> None:
        self.warnings.append(warning)
        if self.verbose:
            print(f"[WARNING] {warning}")

    def parse(self) -> SchemaModel:
        self.warnings = []
        self._anonymous = {}
        self._refs = []
        self._pending = set()
        self.reader = EventReader(self.xml_text)
        root = self._find_root()
        self.model = SchemaModel(
            target_namespace=root.get("targetNamespace"),
            element_form_default=root.get("elementFormDefault"),
            attribute_form_default=root.get("attributeFormDefault"),
            version=root.get("version"),
            namespaces=root.namespaces,
        )
        self.debug_print(f"Parsing schema for namespace {self.model.target_namespace!r}")

        for event in self._children():
            kind = SchemaElementKind.from_local_name(event.local_name)
            if kind == SchemaElementKind.ELEMENT:
                self._parse_top_level_element(event)
            elif kind == SchemaElementKind.COMPLEX_TYPE:
                self._parse_top_level_complex_type(event)
            elif kind == SchemaElementKind.SIMPLE_TYPE:
                self._parse_top_level_simple_type(event)
            else:
                self.debug_print(f"Skipping top-level <{event.name}>")
                self.reader.skip_element()
        self._resolve_refs()
        return self.model

    def _find_root(self) -> XmlEvent:
        while True:
            event = self.reader.next_event()
            if event.kind == EventKind.EOF:
                raise XsdParseError("No schema element found")
            if event.kind == EventKind.START:
                if event.local_name != "schema":
                    raise XsdParseError(f"Expected schema root element, found '{event.name}'")
                return event

    def _children(self) -> Iterator[XmlEvent]:
        """
        Yield the START event of each direct child of the open element.
        The consumer must consume each child completely before asking for the next one.
        """
        while True:
            event = self.reader.next_event()
            if event.kind == EventKind.START:
                yield event
            elif event.kind in (EventKind.END, EventKind.EOF):
                return

    # --- Registration -------------------------------------------------------

    def _register_complex_type(self, complex_type: ComplexType) -> None:
        if complex_type.name in self._anonymous:
            self._rename_anonymous(complex_type.name)
        elif complex_type.name in self.model.complex_types:
            self.log_warning(f"Duplicate complex type '{complex_type.name}': later definition replaces the earlier one")
        self.model.complex_types[complex_type.name] = complex_type

    def _register_simple_type(self, simple_type: SimpleType) -> None:
        if simple_type.name in self._anonymous:
            self._rename_anonymous(simple_type.name)
        elif simple_type.name in self.model.simple_types:
            self.log_warning(f"Duplicate simple type '{simple_type.name}': later definition replaces the earlier one")
        self.model.simple_types[simple_type.name] = simple_type

    def _register_element(self, element: SchemaElement) -> None:
        if element.name in self.model.elements:
            self.log_warning(f"Duplicate element '{element.name}': later definition replaces the earlier one")
        self.model.elements[element.name] = element

    def _register_anonymous(self, anonymous: Union[ComplexType, SimpleType], fallback: str,
                            element_name: Optional[str] = None) -> List[SequenceElement]:
        """
        Register an inline type. Returns the list that collects the fields typed by it,
        so they can be retargeted if a named type claims the name later on.
        """
        if isinstance(anonymous, ComplexType):
            self.model.complex_types[anonymous.name] = anonymous
        else:
            self.model.simple_types[anonymous.name] = anonymous
        self._pending.discard(anonymous.name)
        users: List[SequenceElement] = []
        self._anonymous[anonymous.name] = (fallback, users, element_name)
        return users

    def _rename_anonymous(self, name: str) -> None:
        """Move an inline type out of the way of a named type declared after it."""
        fallback, users, element_name = self._anonymous.pop(name)
        new_name = self._unique_type_name(fallback, exclude=name)
        if name in self.model.complex_types:
            table = self.model.complex_types
        else:
            table = self.model.simple_types
        anonymous = table.pop(name)
        anonymous.name = new_name
        table[new_name] = anonymous
        for field in users:
            field.type = QName(new_name)
        if element_name is not None:
            previous = self.model.elements.get(element_name)
            nillable = previous.nillable if previous is not None else False
            self.model.elements[element_name] = SchemaElement(element_name, QName(new_name), nillable)
        self._anonymous[new_name] = (fallback, users, element_name)
        self.debug_print(f"Anonymous type '{name}' renamed to '{new_name}' to make room for a named type")

    def _unique_type_name(self, base: str, exclude: Optional[str] = None) -> str:
        candidate = base
        suffix = 2
        while self._name_taken(candidate) or candidate == exclude:
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate

    def _name_taken(self, name: str) -> bool:
        return self.model.has_type(name) or name in self._pending

    def _anonymous_type_name(self, parent: str, element_name: str) -> str:
        """Name for an inline type, reserved until the type is registered."""
        if self._name_taken(element_name):
            name = self._unique_type_name(self._fallback_name(parent, element_name))
        else:
            name = element_name
        self._pending.add(name)
        return name

    @staticmethod
    def _fallback_name(parent: str, element_name: str) -> str:
        return f"{parent}{element_name[:1].upper()}{element_name[1:]}"

    def _resolve_refs(self) -> None:
        """Point <element ref=...> fields at the type of the referenced top-level element."""
        for field in self._refs:
            element = self.model.elements.get(field.type.local_name)
            if element is not None:
                field.type = element.type
                field.nillable = field.nillable or element.nillable

    # --- Top level ----------------------------------------------------------

    def _parse_top_level_element(self, event: XmlEvent) -> None:
        name = event.get("name")
        if not name:
            self.log_warning("Top-level element without a name ignored")
            self.reader.skip_element()
            return
        type_name = event.get("type")
        if type_name:
            self._register_element(SchemaElement(name, QName(type_name), event.get("nillable") == "true"))
            self.reader.skip_element()
            return
        for child in self._children():
            if child.local_name in ("complexType", "simpleType"):
                type_name = name
                if self._name_taken(name):
                    type_name = self._unique_type_name(f"{name}Element")
                    self._register_element(SchemaElement(name, QName(type_name), event.get("nillable") == "true"))
                self._pending.add(type_name)
                if child.local_name == "complexType":
                    self._register_anonymous(self._parse_complex_body(type_name), f"{name}Element", name)
                else:
                    self._register_anonymous(self._parse_simple_body(type_name), f"{name}Element", name)
            else:
                self.reader.skip_element()

    def _parse_top_level_complex_type(self, event: XmlEvent) -> None:
        name = event.get("name")
        if not name:
            self.debug_print("Ignoring complexType without a name at top level")
            self.reader.skip_element()
            return
        self._register_complex_type(self._parse_complex_body(name))

    def _parse_top_level_simple_type(self, event: XmlEvent) -> None:
        name = event.get("name")
        if not name:
            self.debug_print("Ignoring simpleType without a name at top level")
            self.reader.skip_element()
            return
        self._register_simple_type(self._parse_simple_body(name))

    # --- Complex types ------------------------------------------------------

    def _parse_complex_body(self, name: str) -> ComplexType:
        """Parse the content of an open <complexType>; the reader ends after its END."""
        fields: List[SequenceElement] = []
        has_sequence = False
        base = None
        for child in self._children():
            local = child.local_name
            if local in ("sequence", "all"):
                has_sequence = True
                fields.extend(self._parse_sequence(name))
            elif local == "complexContent":
                base, extension_fields = self._parse_complex_content(name)
                if extension_fields is not None:
                    has_sequence = True
                    fields.extend(extension_fields)
            elif local == "annotation":
                self.reader.skip_element()
            elif local in UNSUPPORTED_COMPLEX_CONTENT:
                self.log_warning(f"Unsupported construct <{child.name}> in complex type '{name}' skipped")
                self.reader.skip_element()
            else:
                self.log_warning(f"Unexpected <{child.name}> in complex type '{name}' skipped")
                self.reader.skip_element()
        sequence = Sequence(tuple(fields)) if has_sequence else None
        return ComplexType(name, sequence, base)

    def _parse_complex_content(self, name: str) -> Tuple[Optional[QName], Optional[List[SequenceElement]]]:
        base = None
        fields = None
        for child in self._children():
            if child.local_name == "extension":
                base_name = child.get("base")
                base = QName(base_name) if base_name else None
                for ext_child in self._children():
                    if ext_child.local_name in ("sequence", "all"):
                        fields = (fields or []) + self._parse_sequence(name)
                    elif ext_child.local_name == "annotation":
                        self.reader.skip_element()
                    else:
                        self.log_warning(f"Unsupported construct <{ext_child.name}> in extension of '{name}' skipped")
                        self.reader.skip_element()
            elif child.local_name == "annotation":
                self.reader.skip_element()
            else:
                self.log_warning(f"Unsupported construct <{child.name}> in complex content of '{name}' skipped")
                self.reader.skip_element()
        return base, fields

    def _parse_sequence(self, parent: str) -> List[SequenceElement]:
        fields = []
        for child in self._children():
            local = child.local_name
            if local == "element":
                field = self._parse_sequence_element(parent, child)
                if field is not None:
                    fields.append(field)
            elif local in ("sequence", "all"):
                fields.extend(self._parse_sequence(parent))
            elif local == "annotation":
                self.reader.skip_element()
            else:
                self.log_warning(f"Unsupported construct <{child.name}> in sequence of '{parent}' skipped")
                self.reader.skip_element()
        return fields

    def _parse_sequence_element(self, parent: str, event: XmlEvent) -> Optional[SequenceElement]:
        name = event.get("name")
        type_name = event.get("type")
        ref = event.get("ref")
        is_ref = False
        if ref and not name:
            name = QName(ref).local_name
            type_name = ref
            is_ref = True
        if not name:
            self.log_warning(f"Element without name or ref in '{parent}' skipped")
            self.reader.skip_element()
            return None

        type_ref = QName(type_name) if type_name else None
        users = None
        if type_ref is not None:
            self.reader.skip_element()
        else:
            for child in self._children():
                if child.local_name == "complexType" and type_ref is None:
                    anonymous = self._anonymous_type_name(parent, name)
                    users = self._register_anonymous(self._parse_complex_body(anonymous), self._fallback_name(parent, name))
                    type_ref = QName(anonymous)
                elif child.local_name == "simpleType" and type_ref is None:
                    anonymous = self._anonymous_type_name(parent, name)
                    users = self._register_anonymous(self._parse_simple_body(anonymous), self._fallback_name(parent, name))
                    type_ref = QName(anonymous)
                else:
                    self.reader.skip_element()
            if type_ref is None:
                type_ref = QName(ANY_TYPE)

        field = SequenceElement(
            name=name,
            type=type_ref,
            min_occurs=_parse_min_occurs(event.get("minOccurs")),
            max_occurs=event.get("maxOccurs"),
            nillable=event.get("nillable") == "true",
        )
        if users is not None:
            users.append(field)
        if is_ref:
            self._refs.append(field)
        return field

    # --- Simple types -------------------------------------------------------

    def _parse_simple_body(self, name: str) -> SimpleType:
        content = None
        for child in self._children():
            local = child.local_name
            if local == "restriction" and content is None:
                content = RestrictionType(
                    QName(child.get("base") or DEFAULT_SIMPLE_BASE),
                    tuple(self._parse_facets(name)),
                )
            elif local == "list" and content is None:
                content = ListType(QName(child.get("itemType") or DEFAULT_SIMPLE_BASE))
                self.reader.skip_element()
            elif local == "union" and content is None:
                members = (child.get("memberTypes") or "").split()
                content = UnionType(tuple(QName(m) for m in members))
                self.reader.skip_element()
            else:
                self.reader.skip_element()
        if content is None:
            self.log_warning(f"Simple type '{name}' has no restriction, list or union; treated as xs:string")
            content = RestrictionType(QName(DEFAULT_SIMPLE_BASE))
        return SimpleType(name, content)

    def _parse_facets(self, type_name: str) -> List[Facet]:
        facets = []
        for child in self._children():
            kind = FacetKind.from_element(child.local_name)
            value = child.get("value")
            self.reader.skip_element()
            if kind is None or value is None:
                continue
            if kind in INTEGER_FACETS:
                try:
                    facets.append(Facet(kind, int(value)))
                except ValueError:
                    self.debug_print(f"Dropping {kind.value} facet with non-integer value {value!r} on '{type_name}'")
                continue
            facets.append(Facet(kind, value))
        return facets


def parse_schema(xml_text: str, verbose: bool = False) -> Tuple[SchemaModel, List[str]]:
    parser = SchemaParser(xml_text, verbose)
    model = parser.parse()
    return model, parser.warnings
