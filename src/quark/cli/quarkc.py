"""
quarkc - Quark Compiler Command-Line Interface
==============================================

This module implements the command-line interface for the Quark
transpiler. It translates a .quark file to C and, by default, hands the
result to the system C compiler to produce a native executable.

Usage Examples
--------------
Build an executable (./hello):
    $ quarkc hello.quark

Emit C only:
    $ quarkc -c hello.quark -o hello.c

Keep the intermediate C next to the executable:
    $ quarkc -k hello.quark

Inspect the pipeline:
    $ quarkc --tokens hello.quark
    $ quarkc --ast hello.quark

Use another C compiler:
    $ QUARK_CC=clang quarkc hello.quark
"""

import logging
from pathlib import Path
from typing import Optional

import click

from quark import __version__
from quark.ast import ASTPrinter
from quark.cli.errors import handle_cli_exception
from quark.compiler import CompilerOptions, QuarkCompiler
from quark.lexer import tokenize
from quark.parser import parse

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def _check_distinct(source: Path, output: Path) -> None:
    """Refuse to write the output over the source file."""
    if output.resolve() == source.resolve():
        raise click.BadParameter(
            f"output '{output}' would overwrite the source file",
            param_hint="'-o' / '--output'",
        )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: SOURCE without suffix, or SOURCE.c with -c)",
)
@click.option(
    "-c", "--emit-c",
    is_flag=True,
    help="Write the generated C and stop (do not run the C compiler)",
)
@click.option(
    "-k", "--keep-c",
    is_flag=True,
    help="Keep the intermediate .c file after building",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST and exit (for debugging)",
)
@click.option(
    "--check/--no-check",
    default=True,
    show_default=True,
    help="Fill in let types from literal initializers and reject mismatches",
)
@click.option(
    "--flat-operators",
    is_flag=True,
    help="Group binary operators as a flat right-nested chain (no precedence)",
)
@click.option(
    "--cc",
    envvar="QUARK_CC",
    default="cc",
    show_default=True,
    help="C compiler used to build executables",
)
@click.option(
    "--indent",
    type=click.IntRange(min=0),
    default=0,
    help="Spaces per nesting level in the generated C",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="quarkc")
def main(
    source: Path,
    output: Optional[Path],
    emit_c: bool,
    keep_c: bool,
    tokens: bool,
    ast: bool,
    check: bool,
    flat_operators: bool,
    cc: str,
    indent: int,
    verbose: bool,
) -> None:
    """
    Compile a Quark program to C and build it.

    SOURCE is the Quark source file (.quark) to compile.

    \b
    Examples:
        quarkc hello.quark              # Builds ./hello
        quarkc -c hello.quark           # Writes hello.c
        quarkc -k hello.quark -o app    # Builds ./app, keeps app.c
        quarkc --ast hello.quark        # Dumps the syntax tree
    """
    setup_logging(verbose)

    options = CompilerOptions(
        c_compiler=cc,
        type_check=check,
        operator_precedence=not flat_operators,
        indent=" " * indent,
        keep_intermediate=keep_c,
    )

    try:
        text = source.read_text(encoding="utf-8")

        if tokens:
            for token in tokenize(text):
                click.echo(repr(token))
            return

        if ast:
            program = parse(tokenize(text), precedence=options.operator_precedence)
            click.echo(ASTPrinter().print(program))
            return

        compiler = QuarkCompiler(options)
        result = compiler.compile_source(text, str(source))
        logger.debug(
            f"Tokenized: {result.token_count} tokens, "
            f"parsed: {len(result.program)} statements"
        )

        if emit_c:
            if output is None:
                output = source.with_suffix(".c")
            _check_distinct(source, output)
            output.write_text(result.c_source, encoding="utf-8")
            click.echo(f"Compiled {source} -> {output}")
            return

        if output is None:
            output = source.with_suffix("")
        _check_distinct(source, output)
        compiler.build_executable(result.c_source, output)
        click.echo(f"Built {source} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
