"""
Quark Compiler Main Module
==========================

This module provides the main compiler interface for Quark. It
orchestrates the complete pipeline:

    Source → Lex → Parse → (Check) → Generate → C → (cc) → Executable

Usage
-----
Command line:
    $ quarkc hello.quark -o hello

Programmatic:
    >>> from quark import compile_quark
    >>> print(compile_quark('fnc main() int -> ret 0 end'))
    int main() {
    return 0;
    }

Error Handling
--------------
Each stage raises its own QuarkError subclass at the first failure and
the next stage is never attempted. Failures of the external C compiler
are reported as BuildError.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from quark.ast import Statement
from quark.checker import LiteralTypeChecker, TypeChecker
from quark.codegen import CodeGenerator, GeneratorOptions
from quark.errors import BuildError
from quark.lexer import Token, tokenize
from quark.parser import QuarkParser

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        c_compiler: Executable used to build native binaries
        c_flags: Extra flags passed to the C compiler
        type_check: Run LiteralTypeChecker between parsing and generation
        operator_precedence: Group binary operators by precedence; False
            selects flat right-nested chains
        inferred_type: C type emitted for unannotated let bindings
        indent: Indentation unit for nested statements in the C output
        keep_intermediate: Keep the generated .c file after a native build
        build_timeout: Seconds to wait for the C compiler
    """
    c_compiler: str = "cc"
    c_flags: list[str] = field(default_factory=lambda: ["-std=c99"])
    type_check: bool = False
    operator_precedence: bool = True
    inferred_type: str = "int"
    indent: str = ""
    keep_intermediate: bool = False
    build_timeout: int = 60


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        tokens: Token list from the lexer
        program: Parsed (and, if enabled, checked) program
        c_source: Generated C source
        token_count: Number of tokens lexed, including EOF
    """
    filename: str = ""
    tokens: list[Token] = field(default_factory=list)
    program: tuple[Statement, ...] = ()
    c_source: str = ""
    token_count: int = 0


class QuarkCompiler:
    """
    Quark to C compiler.

    Example:
        compiler = QuarkCompiler()
        result = compiler.compile_file("hello.quark")
        compiler.build_executable(result.c_source, "hello")

    Attributes:
        options: Compiler configuration options
        checker: Type checker run when options.type_check is set
    """

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        checker: Optional[TypeChecker] = None,
    ):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
            checker: Type checker collaborator (LiteralTypeChecker if None)
        """
        self.options = options or CompilerOptions()
        self.checker = checker or LiteralTypeChecker()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile Quark source code to C.

        Args:
            source: Quark source code string
            filename: Source filename for diagnostics

        Returns:
            CompilerResult containing the C output and intermediate stages

        Raises:
            LexicalError: If tokenizing fails
            QuarkSyntaxError: If parsing fails
            QuarkTypeError: If type checking is enabled and reports a failure
            CodeGenError: If the program cannot be expressed in C
        """
        tokens = tokenize(source)
        logger.debug(f"{filename}: {len(tokens)} tokens")

        parser = QuarkParser(tokens, precedence=self.options.operator_precedence)
        program = parser.parse()
        logger.debug(f"{filename}: {len(program)} top-level statements")

        if self.options.type_check:
            checked = self.checker.check(program)
            if not checked.ok:
                raise checked.errors[0]
            program = checked.program

        generator = CodeGenerator(GeneratorOptions(
            inferred_type=self.options.inferred_type,
            indent=self.options.indent,
        ))
        c_source = generator.generate(program)

        return CompilerResult(
            filename=filename,
            tokens=tokens,
            program=program,
            c_source=c_source,
            token_count=len(tokens),
        )

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a Quark source file to C.

        Raises:
            FileNotFoundError: If the source file does not exist
            QuarkError: If compilation fails
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def build_executable(self, c_source: str, output_path: str | Path) -> Path:
        """
        Build a native executable from generated C source.

        The C text is written to '<output>.c' next to the output, the C
        compiler is run on it, and the intermediate file is removed
        afterwards unless options.keep_intermediate is set.

        Args:
            c_source: Generated C source
            output_path: Path of the executable to produce

        Returns:
            Path of the built executable

        Raises:
            BuildError: If the compiler is missing, times out, or fails
        """
        output = Path(output_path)
        intermediate = output.with_name(output.name + ".c")
        intermediate.write_text(c_source, encoding="utf-8")

        cmd = [
            self.options.c_compiler,
            *self.options.c_flags,
            str(intermediate),
            "-o",
            str(output),
        ]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.options.build_timeout,
            )
        except FileNotFoundError:
            raise BuildError(
                f"C compiler not found: {self.options.c_compiler}",
                command=cmd,
            )
        except subprocess.TimeoutExpired:
            raise BuildError(
                f"C compiler timed out after {self.options.build_timeout}s",
                command=cmd,
            )
        finally:
            if not self.options.keep_intermediate:
                intermediate.unlink(missing_ok=True)

        if result.returncode != 0:
            raise BuildError(
                f"C compilation failed for {intermediate.name}",
                command=cmd,
                stderr=result.stderr,
                return_code=result.returncode,
            )

        logger.debug(f"Built {output}")
        return output


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_quark(source: str, options: Optional[CompilerOptions] = None) -> str:
    """
    Compile Quark source code to C.

    Args:
        source: Quark source code
        options: Compiler options (uses defaults if None)

    Returns:
        Generated C source text

    Raises:
        QuarkError: If any pipeline stage fails
    """
    return QuarkCompiler(options).compile_source(source).c_source


def compile_file(
    filepath: str | Path,
    output_path: Optional[str | Path] = None,
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile a Quark source file to C, optionally writing the result.

    Args:
        filepath: Path to the .quark source file
        output_path: Where to write the C source (not written if None)
        options: Compiler options (uses defaults if None)

    Returns:
        Generated C source text
    """
    c_source = QuarkCompiler(options).compile_file(filepath).c_source

    if output_path:
        Path(output_path).write_text(c_source, encoding="utf-8")

    return c_source
