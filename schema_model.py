"""
schema_model.py
Type model for the XML Schema embedded in a WSDL document.
"""
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from namespace_resolver import QName


class FacetKind(Enum):
    ENUMERATION = "enumeration"
    PATTERN = "pattern"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    LENGTH = "length"
    MIN_INCLUSIVE = "minInclusive"
    MAX_INCLUSIVE = "maxInclusive"
    MIN_EXCLUSIVE = "minExclusive"
    MAX_EXCLUSIVE = "maxExclusive"
    TOTAL_DIGITS = "totalDigits"
    FRACTION_DIGITS = "fractionDigits"

    @classmethod
    def from_element(cls, local_name: str) -> Optional['FacetKind']:
        for kind in cls:
            if kind.value == local_name:
                return kind
        return None


# Facets whose value must be a non-negative integer.
INTEGER_FACETS = {
    FacetKind.MIN_LENGTH,
    FacetKind.MAX_LENGTH,
    FacetKind.LENGTH,
    FacetKind.TOTAL_DIGITS,
    FacetKind.FRACTION_DIGITS,
}


class Facet:
    def __init__(self, kind: FacetKind, value: Union[str, int]):
        self.kind = kind
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Facet):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __repr__(self):
        return f"Facet({self.kind.value}={self.value!r})"


class SequenceElement:
    def __init__(
        self,
        name: str,
        type: QName,
        min_occurs: Optional[int] = 1,
        max_occurs: Optional[str] = None,
        nillable: bool = False,
    ):
        self.name = name
        self.type = type
        self.min_occurs = min_occurs
        self.max_occurs = max_occurs
        self.nillable = nillable

    def __repr__(self):
        return (f"SequenceElement(name={self.name!r}, type={self.type!r}, "
                f"min_occurs={self.min_occurs!r}, max_occurs={self.max_occurs!r})")


class Sequence:
    def __init__(self, elements: Tuple[SequenceElement, ...] = ()):
        self.elements = tuple(elements)

    def __len__(self):
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)


class ComplexType:
    def __init__(self, name: str, sequence: Optional[Sequence] = None, base: Optional[QName] = None):
        self.name = name
        self.sequence = sequence
        self.base = base

    @property
    def fields(self) -> Tuple[SequenceElement, ...]:
        return self.sequence.elements if self.sequence is not None else ()

    def __repr__(self):
        return f"ComplexType(name={self.name!r}, fields={len(self.fields)}, base={self.base!r})"


class RestrictionType:
    def __init__(self, base: QName, facets: Tuple[Facet, ...] = ()):
        self.base = base
        self.facets = tuple(facets)

    def enumeration_values(self) -> List[str]:
        return [f.value for f in self.facets if f.kind == FacetKind.ENUMERATION]


class ListType:
    def __init__(self, item_type: QName):
        self.item_type = item_type


class UnionType:
    def __init__(self, member_types: Tuple[QName, ...] = ()):
        self.member_types = tuple(member_types)


class SimpleType:
    """A named simple type; `content` is a RestrictionType, ListType or UnionType."""

    def __init__(self, name: str, content: Union[RestrictionType, ListType, UnionType]):
        self.name = name
        self.content = content

    def enumeration_values(self) -> List[str]:
        if isinstance(self.content, RestrictionType):
            return self.content.enumeration_values()
        return []

    def __repr__(self):
        return f"SimpleType(name={self.name!r}, content={type(self.content).__name__})"


class SchemaElement:
    def __init__(self, name: str, type: QName, nillable: bool = False):
        self.name = name
        self.type = type
        self.nillable = nillable

    def __repr__(self):
        return f"SchemaElement(name={self.name!r}, type={self.type!r})"


class SchemaModel:
    def __init__(
        self,
        target_namespace: Optional[str] = None,
        element_form_default: Optional[str] = None,
        attribute_form_default: Optional[str] = None,
        version: Optional[str] = None,
        namespaces: Optional[Dict[str, str]] = None,
        complex_types: Optional[Dict[str, ComplexType]] = None,
        simple_types: Optional[Dict[str, SimpleType]] = None,
        elements: Optional[Dict[str, SchemaElement]] = None,
    ):
        self.target_namespace = target_namespace
        self.element_form_default = element_form_default
        self.attribute_form_default = attribute_form_default
        self.version = version
        self.namespaces = dict(namespaces or {})
        self.complex_types = dict(complex_types or {})
        self.simple_types = dict(simple_types or {})
        self.elements = dict(elements or {})

    def qualifies_children(self) -> bool:
        return self.element_form_default == "qualified"

    def has_type(self, name: str) -> bool:
        return name in self.complex_types or name in self.simple_types

    def __repr__(self):
        return (f"SchemaModel(target_namespace={self.target_namespace!r}, "
                f"complex_types={len(self.complex_types)}, simple_types={len(self.simple_types)}, "
                f"elements={len(self.elements)})")
