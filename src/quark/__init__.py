"""
Quark - A Quark to C Transpiler
===============================

This package translates programs written in Quark, a small statically
typed scripting language, into C99 source, and drives the system C
compiler to turn that source into a native executable.

Pipeline
--------
    Quark Source → Lexer → Parser → AST → (Type Checker) → Code Generator → C

Main Components
---------------
- **lexer**: QuarkLexer / tokenize(), source text to tokens
- **parser**: QuarkParser / parse(), tokens to a tuple of statements
- **ast**: frozen AST node dataclasses, ASTVisitor, ASTPrinter
- **types**: the closed Quark type vocabulary and its C mapping
- **checker**: TypeChecker interface and LiteralTypeChecker
- **codegen**: CodeGenerator / generate(), statements to C text
- **compiler**: QuarkCompiler driver and native build support
- **errors**: QuarkError taxonomy (Lexical, Syntax, Type, Code generation)

Quick Start
-----------
>>> from quark import compile_quark
>>> print(compile_quark('''
... fnc main() int ->
...     let x = 5
...     let y = x + 2
...     ret y
... end
... '''))
int main() {
int x = 5;
int y = x + 2;
return y;
}

Or use the command-line tool:
    $ quarkc hello.quark -o hello

Language Summary
----------------
- Bindings: let x = 5, let name: string = "quark"
- Functions: fnc add(a: int, b: int) int -> ret a + b end
- Control flow: if/else, while, for x in range(n), for x in [1, 2, 3]
- Output: print(a, b) maps to printf
"""

__version__ = "1.0.0"
__author__ = "Quark Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from quark.errors import (
    ErrorKind,
    QuarkError,
    LexicalError,
    QuarkSyntaxError,
    QuarkTypeError,
    CodeGenError,
    BuildError,
)
from quark.types import (
    TypeKind,
    QuarkType,
    TYPE_INT,
    TYPE_FLOAT,
    TYPE_STRING,
    TYPE_BOOL,
    TYPE_VOID,
    TYPE_UNKNOWN,
    array_of,
)
from quark.lexer import Token, TokenType, QuarkLexer, tokenize
from quark.parser import QuarkParser, parse, parse_source
from quark.checker import CheckResult, TypeChecker, LiteralTypeChecker
from quark.codegen import CodeGenerator, GeneratorOptions, generate
from quark.compiler import (
    CompilerOptions,
    CompilerResult,
    QuarkCompiler,
    compile_quark,
    compile_file,
)

__all__ = [
    # Version info
    "__version__",
    # Errors
    "ErrorKind",
    "QuarkError",
    "LexicalError",
    "QuarkSyntaxError",
    "QuarkTypeError",
    "CodeGenError",
    "BuildError",
    # Types
    "TypeKind",
    "QuarkType",
    "TYPE_INT",
    "TYPE_FLOAT",
    "TYPE_STRING",
    "TYPE_BOOL",
    "TYPE_VOID",
    "TYPE_UNKNOWN",
    "array_of",
    # Lexer
    "Token",
    "TokenType",
    "QuarkLexer",
    "tokenize",
    # Parser
    "QuarkParser",
    "parse",
    "parse_source",
    # Type checking
    "CheckResult",
    "TypeChecker",
    "LiteralTypeChecker",
    # Code generation
    "CodeGenerator",
    "GeneratorOptions",
    "generate",
    # Compiler driver
    "CompilerOptions",
    "CompilerResult",
    "QuarkCompiler",
    "compile_quark",
    "compile_file",
]
