#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the adoc2ast library.

This module defines specialized exception classes for the conditions that
abort a parse. Recoverable structural anomalies (out-of-sequence headings,
malformed list numbering, unreadable include targets and the like) are never
raised; they are reported through logging and parsing continues.

Exception Hierarchy
-------------------
- Adoc2AstError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class for parser)

  - FileError (file access and I/O)
    - FileNotFoundError (file doesn't exist)
    - FileAccessError (permissions, locked files)

  - ParsingError (input document parsing failures)
    - UnsupportedBlockError (unknown block context reached the build step)
    - NestingDepthError (nested block recursion guard tripped)

  - SecurityError (security violations)
    - IncludeSecurityError (include path escapes the permitted root)

Notes
-----
:class:`FileNotFoundError` shadows the builtin of the same name inside this
module. It does not derive from the builtin, so ``except FileNotFoundError``
without an import from here does not catch it. Import it under another name
(``from adoc2ast.exceptions import FileNotFoundError as AdocFileNotFoundError``)
rather than with ``import *``.

"""

from typing import Any


class Adoc2AstError(Exception):
    """Base exception class for all adoc2ast-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Adoc2AstError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an incorrect options class is provided to a parser.

    Parameters
    ----------
    parser_name : str
        Name of the parser that received invalid options
    expected_type : type
        The expected options class type
    received_type : type
        The actual options class type that was received
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        parser_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error."""
        if message is None:
            message = (
                f"{parser_name} expected options of type '{expected_type.__name__}' "
                f"but received '{received_type.__name__}'."
            )
        super().__init__(
            message, parameter_name="options", parameter_value=received_type, original_error=original_error
        )
        self.parser_name = parser_name
        self.expected_type = expected_type
        self.received_type = received_type


class FileError(Adoc2AstError):
    """Base exception for file access and I/O errors.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the problematic file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path and message."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class FileNotFoundError(FileError):
    """Exception raised when an input file cannot be found.

    Not a subclass of the builtin :class:`FileNotFoundError`; catch it as
    :class:`FileError` or :class:`Adoc2AstError`.
    """

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file not found error."""
        if message is None:
            message = f"File not found: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class FileAccessError(FileError):
    """Exception raised when an input file cannot be read."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file access error."""
        if message is None:
            message = f"Cannot access file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class ParsingError(Adoc2AstError):
    """Exception raised when document parsing fails.

    Parameters
    ----------
    message : str
        Description of the parsing failure
    parsing_stage : str, optional
        The stage of parsing where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the parsing failure

    """

    def __init__(self, message: str, parsing_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage


class UnsupportedBlockError(ParsingError):
    """Exception raised when a block context nobody can build reaches the build step.

    This indicates a misconfigured extension (for example a block processor
    registered for a style but producing an unknown context), not bad input.

    Parameters
    ----------
    context : str
        The block context that could not be built
    message : str, optional
        Custom error message

    """

    def __init__(self, context: str, message: str | None = None):
        """Initialize the unsupported block error."""
        if message is None:
            message = f"Unsupported block type {context!r} at build step"
        super().__init__(message, parsing_stage="build_block")
        self.context = context


class NestingDepthError(ParsingError):
    """Exception raised when nested blocks exceed the configured depth."""

    def __init__(self, depth: int, limit: int):
        """Initialize the nesting depth error."""
        super().__init__(
            f"Maximum block nesting depth of {limit} exceeded (depth {depth})", parsing_stage="parse_blocks"
        )
        self.depth = depth
        self.limit = limit


class SecurityError(Adoc2AstError):
    """Base exception for security violations.

    Parameters
    ----------
    message : str
        Description of the security violation
    original_error : Exception, optional
        The original exception that caused this error

    """


class IncludeSecurityError(SecurityError):
    """Exception raised when an include target resolves outside the permitted root.

    Parameters
    ----------
    target : str
        The include target as written in the directive
    jail : str
        The directory includes are confined to

    """

    def __init__(self, target: str, jail: str):
        """Initialize the include security error."""
        super().__init__(f"Include target {target!r} resolves outside of the permitted directory {jail!r}")
        self.target = target
        self.jail = jail


__all__ = [
    "Adoc2AstError",
    "ValidationError",
    "InvalidOptionsError",
    "FileError",
    "FileNotFoundError",
    "FileAccessError",
    "ParsingError",
    "UnsupportedBlockError",
    "NestingDepthError",
    "SecurityError",
    "IncludeSecurityError",
]
