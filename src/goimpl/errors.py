"""Domain-specific errors for goimpl."""

from __future__ import annotations


class GoImplError(Exception):
    """Base error for goimpl."""


class ConfigError(GoImplError):
    """Raised when generation options are contradictory or incomplete."""


class DescriptorError(GoImplError):
    """Raised when a type descriptor document cannot be decoded."""


class GoSyntaxError(GoImplError):
    """Raised when Go text fails to parse."""

    def __init__(self, message: str, line: int = 0, col: int = 0):
        self.message = message
        self.line = line
        self.col = col
        if line:
            super().__init__(f"{line}:{col}: {message}")
        else:
            super().__init__(message)


class RenderError(GoImplError):
    """Raised when the assembled stub text is not valid Go.

    `text` keeps the raw assembled text for diagnostics.
    """

    def __init__(self, message: str, text: str):
        super().__init__(message)
        self.text = text


class ReformatError(GoImplError):
    """Raised when the external goimports pass fails.

    `text` is the input handed to the tool, `output` whatever it printed.
    """

    def __init__(self, message: str, text: str, output: str = ""):
        super().__init__(message)
        self.text = text
        self.output = output
