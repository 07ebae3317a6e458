"""
Shared utilities for the code generators.
Handles identifier normalization, reserved word sanitization and collision-free naming.
"""
import keyword
import re
from typing import Iterable, Optional, Set

# Python keywords and builtins that generated field and method names must not shadow.
PYTHON_RESERVED_NAMES = set(keyword.kwlist) | {
    'dict', 'list', 'set', 'tuple', 'int', 'float', 'str', 'bool', 'bytes', 'object', 'type', 'field',
    'print', 'super', 'self', 'cls', 'property', 'staticmethod', 'classmethod', 'open', 'input', 'id',
    'sum', 'min', 'max', 'abs', 'all', 'any', 'bin', 'hex', 'oct', 'len', 'map', 'filter', 'zip', 'range',
    'format', 'vars', 'hash', 'iter', 'next', 'repr', 'slice', 'sorted', 'callable', 'dir', 'help',
}

# Names bound at module level in the generated client module.
GENERATED_MODULE_NAMES = {
    'Any', 'Enum', 'List', 'Optional', 'Protocol', 'SoapTransport', 'dataclass', 'field',
    'TARGET_NAMESPACE', 'QUALIFY_CHILDREN', 'annotations',
}

RESERVED_TYPE_NAMES = set(keyword.kwlist) | GENERATED_MODULE_NAMES | {
    'str', 'int', 'float', 'bool', 'bytes', 'list', 'dict', 'object', 'type',
}

# Attributes of the generated client class.
RESERVED_METHOD_NAMES = PYTHON_RESERVED_NAMES | {'transport', 'endpoint'}

_NON_ALNUM = re.compile(r'[^0-9A-Za-z]+')
_ACRONYM_BOUNDARY = re.compile(r'([A-Z]+)([A-Z][a-z])')
_WORD_BOUNDARY = re.compile(r'([a-z0-9])([A-Z])')


def to_pascal_case(name: str) -> str:
    """'getAllVersions' -> 'GetAllVersions', 'order-line_item' -> 'OrderLineItem'."""
    chunks = [c for c in _NON_ALNUM.split(name) if c]
    return ''.join(c[0].upper() + c[1:] for c in chunks)


def to_snake_case(name: str) -> str:
    """'intA' -> 'int_a', 'ISOCode' -> 'iso_code'."""
    s = _ACRONYM_BOUNDARY.sub(r'\1_\2', name)
    s = _WORD_BOUNDARY.sub(r'\1_\2', s)
    s = _NON_ALNUM.sub('_', s.lower())
    s = re.sub(r'_+', '_', s)
    return s.strip('_')


def safe_field_name(name: str, reserved: Optional[Set[str]] = None) -> str:
    reserved = PYTHON_RESERVED_NAMES if reserved is None else reserved
    return name + '_' if name in reserved else name


def field_identifier(name: str) -> str:
    ident = to_snake_case(name) or 'value'
    if ident[0].isdigit():
        ident = '_' + ident
    return safe_field_name(ident)


def method_identifier(name: str) -> str:
    ident = to_snake_case(name) or 'call'
    if ident[0].isdigit():
        ident = '_' + ident
    return safe_field_name(ident, RESERVED_METHOD_NAMES)


def type_identifier(name: str) -> str:
    ident = to_pascal_case(name) or 'Type'
    if ident[0].isdigit():
        ident = 'Type' + ident
    return safe_field_name(ident, RESERVED_TYPE_NAMES)


def enum_member_identifier(value: str) -> str:
    ident = to_pascal_case(value) or 'Value'
    if ident[0].isdigit():
        ident = 'Value' + ident
    return safe_field_name(ident, set(keyword.kwlist))


class NameRegistry:
    """
    Hands out unique identifiers within one scope. A name that is already taken
    gets a numeric suffix: Foo, Foo2, Foo3 ... (or foo, foo_2, foo_3 with separator '_').
    """

    def __init__(self, reserved: Iterable[str] = (), separator: str = ''):
        self.used: Set[str] = set(reserved)
        self.separator = separator

    def claim(self, name: str) -> str:
        if name not in self.used:
            self.used.add(name)
            return name
        counter = 2
        while f"{name}{self.separator}{counter}" in self.used:
            counter += 1
        unique = f"{name}{self.separator}{counter}"
        self.used.add(unique)
        return unique

    def __contains__(self, name):
        return name in self.used
