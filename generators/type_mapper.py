"""
Maps XSD type references and occurrence constraints to Python type expressions.
"""
from typing import Dict, Optional, Union

from namespace_resolver import QName
from generators.generator_utils import type_identifier


class PrimitiveMapping:
    """Python type for an XSD builtin, plus the XSD value width where it has one."""

    def __init__(self, py_type: str, bits: Optional[int] = None, signed: Optional[bool] = None):
        self.py_type = py_type
        self.bits = bits
        self.signed = signed

    def __repr__(self):
        return f"PrimitiveMapping({self.py_type!r}, bits={self.bits!r}, signed={self.signed!r})"


_STRING_TYPES = [
    'string', 'normalizedString', 'token', 'language', 'Name', 'NCName', 'NMTOKEN', 'NMTOKENS',
    'ID', 'IDREF', 'IDREFS', 'ENTITY', 'ENTITIES', 'anyURI', 'QName', 'NOTATION',
    'anyType', 'anySimpleType',
]
_TEMPORAL_TYPES = [
    'dateTime', 'date', 'time', 'duration', 'gYearMonth', 'gYear', 'gMonthDay', 'gDay', 'gMonth',
]

XSD_PRIMITIVES: Dict[str, PrimitiveMapping] = {}
XSD_PRIMITIVES.update({name: PrimitiveMapping('str') for name in _STRING_TYPES})
XSD_PRIMITIVES.update({name: PrimitiveMapping('str') for name in _TEMPORAL_TYPES})
XSD_PRIMITIVES.update({
    'byte': PrimitiveMapping('int', 8, True),
    'short': PrimitiveMapping('int', 16, True),
    'int': PrimitiveMapping('int', 32, True),
    'integer': PrimitiveMapping('int', 32, True),
    'long': PrimitiveMapping('int', 64, True),
    'unsignedByte': PrimitiveMapping('int', 8, False),
    'unsignedShort': PrimitiveMapping('int', 16, False),
    'unsignedInt': PrimitiveMapping('int', 32, False),
    'unsignedLong': PrimitiveMapping('int', 64, False),
    # Arbitrary-precision integer kinds are folded to signed 64 bit.
    'positiveInteger': PrimitiveMapping('int', 64, True),
    'nonNegativeInteger': PrimitiveMapping('int', 64, True),
    'nonPositiveInteger': PrimitiveMapping('int', 64, True),
    'negativeInteger': PrimitiveMapping('int', 64, True),
    'float': PrimitiveMapping('float', 32, True),
    'double': PrimitiveMapping('float', 64, True),
    'decimal': PrimitiveMapping('float', 64, True),
    'boolean': PrimitiveMapping('bool'),
    'base64Binary': PrimitiveMapping('bytes'),
    'hexBinary': PrimitiveMapping('bytes'),
})

def _raw(name: Union[str, QName]) -> str:
    return name.raw if isinstance(name, QName) else name


class TypeMapper:
    """
    Resolves XSD type names. Custom mappings take precedence over the builtin table
    and are matched on the raw name first, then on the local name.
    """

    def __init__(self):
        self.custom_mappings: Dict[str, str] = {}

    def add_mapping(self, xsd_name: str, py_type: str) -> None:
        self.custom_mappings[xsd_name] = py_type

    def primitive_for(self, qname: Union[str, QName]) -> Optional[PrimitiveMapping]:
        return XSD_PRIMITIVES.get(QName(_raw(qname)).local_name)

    def is_builtin_type(self, qname: Union[str, QName]) -> bool:
        return self.primitive_for(qname) is not None

    def map_type(self, qname: Union[str, QName]) -> str:
        raw = _raw(qname)
        local = QName(raw).local_name
        if raw in self.custom_mappings:
            return self.custom_mappings[raw]
        if local in self.custom_mappings:
            return self.custom_mappings[local]
        primitive = XSD_PRIMITIVES.get(local)
        if primitive is not None:
            return primitive.py_type
        return type_identifier(local)

    @staticmethod
    def is_optional(min_occurs: Optional[int], nillable: bool = False) -> bool:
        return nillable or min_occurs is None or min_occurs == 0

    @staticmethod
    def is_collection(max_occurs: Optional[str]) -> bool:
        if max_occurs is None:
            return False
        if max_occurs == "unbounded":
            return True
        try:
            return int(max_occurs) > 1
        except ValueError:
            return False

    @staticmethod
    def wrap_optional(py_type: str) -> str:
        return f"Optional[{py_type}]"

    @staticmethod
    def wrap_collection(py_type: str) -> str:
        return f"List[{py_type}]"

    def map_type_with_occurs(
        self,
        qname: Union[str, QName],
        min_occurs: Optional[int] = 1,
        max_occurs: Optional[str] = None,
        nillable: bool = False,
    ) -> str:
        py_type = self.map_type(qname)
        if self.is_collection(max_occurs):
            py_type = self.wrap_collection(py_type)
        if self.is_optional(min_occurs, nillable):
            py_type = self.wrap_optional(py_type)
        return py_type
