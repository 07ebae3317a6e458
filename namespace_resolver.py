"""
namespace_resolver.py
Qualified names and the document-scoped prefix table used to resolve them to namespace URIs.
"""
from typing import Dict, Optional


class QName:
    """
    A name as written in the document, e.g. 'tns:AddRequest'.
    The prefix and local part are split off on demand.
    """
    __slots__ = ('raw',)

    def __init__(self, raw: str):
        self.raw = raw

    @property
    def local_name(self) -> str:
        return self.raw.rsplit(':', 1)[-1]

    @property
    def prefix(self) -> Optional[str]:
        if ':' not in self.raw:
            return None
        return self.raw.split(':', 1)[0]

    def __eq__(self, other):
        if isinstance(other, QName):
            return self.raw == other.raw
        return NotImplemented

    def __hash__(self):
        return hash(self.raw)

    def __str__(self):
        return self.raw

    def __repr__(self):
        return f"QName({self.raw!r})"


def optional_qname(raw: Optional[str]) -> Optional[QName]:
    return QName(raw) if raw else None


class NamespaceTable:
    """
    Prefix -> URI bindings collected over the whole document.
    The first binding of a prefix wins; the default namespace lives under ''.

    Scoping is not tracked: an element that locally rebinds a prefix already seen
    (e.g. `soap` redeclared to the SOAP 1.2 URI inside one binding) still resolves
    to the first URI.
    """

    def __init__(self, bindings: Optional[Dict[str, str]] = None):
        self._bindings: Dict[str, str] = {}
        for prefix, uri in (bindings or {}).items():
            self.record(prefix, uri)

    def record(self, prefix: Optional[str], uri: str) -> None:
        self._bindings.setdefault(prefix or '', uri)

    def record_all(self, declarations: Dict[str, str]) -> None:
        for prefix, uri in declarations.items():
            self.record(prefix, uri)

    def lookup(self, prefix: Optional[str]) -> Optional[str]:
        return self._bindings.get(prefix or '')

    def resolve(self, raw_name: str) -> Optional[str]:
        """Return the namespace URI bound to the prefix of raw_name, or None if the prefix is unknown."""
        return self.lookup(QName(raw_name).prefix)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._bindings)

    def __contains__(self, prefix):
        return (prefix or '') in self._bindings

    def __len__(self):
        return len(self._bindings)
