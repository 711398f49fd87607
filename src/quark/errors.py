"""
Quark Error Taxonomy
====================

This module defines the failure vocabulary shared by every stage of the
Quark transpiler. The taxonomy is flat: one base class and
one subclass per failure kind.

Exception Hierarchy
-------------------
QuarkError (base)
├── LexicalError - malformed character stream
├── QuarkSyntaxError - malformed token stream / grammar violation
├── QuarkTypeError - reported by a type checker collaborator
└── CodeGenError - AST shape or type the generator cannot render

BuildError is not part of the taxonomy. It reports a failure of the
external C compiler, which runs after the core pipeline has finished.

Error Message Format
--------------------
    Syntax error: Expected '=' in let statement
    hint: a let binding needs an initializer, e.g. 'let x = 5'

Each stage raises at its first failure. There is no multi-error
accumulation and no recovery inside a stage.
"""

from enum import Enum
from typing import Optional


# =============================================================================
# Failure Kinds
# =============================================================================

class ErrorKind(Enum):
    """The four failure kinds a pipeline stage can report."""
    LEXICAL = "Lexical"
    SYNTAX = "Syntax"
    TYPE = "Type"
    CODEGEN = "Code generation"


# =============================================================================
# Base Exception
# =============================================================================

class QuarkError(Exception):
    """
    Base exception for all Quark pipeline failures.

    Callers that do not care which stage failed can catch this class:

        try:
            c_source = compile_quark(source)
        except QuarkError as e:
            print(e, file=sys.stderr)

    Attributes:
        kind: The ErrorKind tag
        message: The error description
        hint: A suggestion for fixing the error (optional)
    """

    kind: ErrorKind = ErrorKind.SYNTAX

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format as '<Kind> error: message' with an optional hint line."""
        text = f"{self.kind.value} error: {self.message}"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text


# =============================================================================
# Stage Errors
# =============================================================================

class LexicalError(QuarkError):
    """
    Malformed character stream.

    Raised by the lexer for characters that start no token, and for
    string literals that run to the end of input.
    """
    kind = ErrorKind.LEXICAL


class QuarkSyntaxError(QuarkError):
    """
    Malformed token stream.

    Raised by the parser when the tokens do not match the grammar,
    e.g. a let binding without '=' or a block without 'end'.
    """
    kind = ErrorKind.SYNTAX


class QuarkTypeError(QuarkError):
    """Type failure reported by a type checker collaborator."""
    kind = ErrorKind.TYPE


class CodeGenError(QuarkError):
    """
    AST the code generator cannot render as C.

    Examples:
        - a binding whose type is still Unknown
        - a for loop over an iterable with no known length
        - a statement variant with no C translation
    """
    kind = ErrorKind.CODEGEN


# =============================================================================
# Native Build Errors
# =============================================================================

class BuildError(RuntimeError):
    """
    The external C compiler could not be run or rejected the generated code.

    Attributes:
        command: The command line that was executed
        stderr: Captured compiler diagnostics
        return_code: Compiler exit status (None if it never started)
    """

    def __init__(
        self,
        message: str,
        command: Optional[list[str]] = None,
        stderr: str = "",
        return_code: Optional[int] = None,
    ):
        self.command = command or []
        self.stderr = stderr
        self.return_code = return_code
        text = message
        if stderr:
            text += f"\n{stderr.rstrip()}"
        super().__init__(text)
