"""
codegen_errors.py
Exception types raised while reading, parsing and generating code from WSDL documents.
"""
from typing import Optional


class CodegenError(Exception):
    """Base class for every fatal error raised by WSDL Wrangler."""

    def with_context(self, context: str) -> 'ContextError':
        """
        Wrap this error with a description of what was being done when it happened.
        The original error is kept as __cause__.
        """
        err = ContextError(context, self)
        err.__cause__ = self
        return err


class ContextError(CodegenError):
    def __init__(self, context: str, source: CodegenError):
        self.context = context
        self.source = source
        super().__init__(f"{context}: {source}")


class FileReadError(CodegenError):
    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to read file '{path}': {cause}")


class FileWriteError(CodegenError):
    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write file '{path}': {cause}")


class XmlParseError(CodegenError):
    """The tokenizer could not read the document (not well-formed XML)."""


class WsdlParseError(CodegenError):
    pass


class XsdParseError(CodegenError):
    pass


class InvalidWsdlError(WsdlParseError):
    """Structural problem in the WSDL document, e.g. a message part without element or type."""


class MissingAttributeError(WsdlParseError):
    def __init__(self, element: str, attribute: str, detail: Optional[str] = None):
        self.element = element
        self.attribute = attribute
        message = f"Missing required attribute '{attribute}' in element '{element}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class MissingConfigurationError(CodegenError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required configuration field: {field}")
