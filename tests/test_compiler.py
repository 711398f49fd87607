"""
Quark Compiler Driver Test Suite
================================

Tests for quark.compiler (the pipeline driver and native builds) and
the quark.errors taxonomy.

Test Organization
-----------------
- TestErrors: Error kinds and message format
- TestCompileSource: Pipeline stages and failure propagation
- TestCompileFile: File input and output
- TestBuildExecutable: C compiler invocation (stubbed)
- TestNativeBuild: End-to-end builds with a real C compiler
"""

import shutil
import subprocess

import pytest

from quark import compile_file, compile_quark
from quark.compiler import CompilerOptions, QuarkCompiler
from quark.lexer import TokenType
from quark.ast import FunctionNode, LetStatement
from quark.types import TYPE_STRING
from quark.errors import (
    BuildError,
    CodeGenError,
    ErrorKind,
    LexicalError,
    QuarkError,
    QuarkSyntaxError,
    QuarkTypeError,
)


MAIN_SOURCE = """
fnc main() int ->
    let x = 5
    let y = x + 2
    ret y
end
"""

MAIN_C = "int main() {\nint x = 5;\nint y = x + 2;\nreturn y;\n}\n"


# =============================================================================
# Error Taxonomy Tests
# =============================================================================

class TestErrors:
    """Tests for the QuarkError hierarchy."""

    @pytest.mark.parametrize("cls, kind, prefix", [
        (LexicalError, ErrorKind.LEXICAL, "Lexical error: "),
        (QuarkSyntaxError, ErrorKind.SYNTAX, "Syntax error: "),
        (QuarkTypeError, ErrorKind.TYPE, "Type error: "),
        (CodeGenError, ErrorKind.CODEGEN, "Code generation error: "),
    ])
    def test_kinds(self, cls, kind, prefix):
        error = cls("boom")
        assert isinstance(error, QuarkError)
        assert error.kind == kind
        assert str(error) == f"{prefix}boom"

    def test_hint(self):
        error = QuarkSyntaxError("bad", hint="try again")
        assert error.hint == "try again"
        assert str(error) == "Syntax error: bad\nhint: try again"

    def test_build_error_outside_taxonomy(self):
        error = BuildError("failed", stderr="x.c:1: error\n", return_code=1)
        assert not isinstance(error, QuarkError)
        assert isinstance(error, RuntimeError)
        assert str(error) == "failed\nx.c:1: error"
        assert error.return_code == 1


# =============================================================================
# Pipeline Tests
# =============================================================================

class TestCompileSource:
    """Tests for QuarkCompiler.compile_source()."""

    def test_compile_quark(self):
        assert compile_quark(MAIN_SOURCE) == MAIN_C

    def test_result_fields(self):
        result = QuarkCompiler().compile_source(MAIN_SOURCE, "main.quark")
        assert result.filename == "main.quark"
        assert result.c_source == MAIN_C
        assert result.token_count == len(result.tokens)
        assert result.tokens[-1].type == TokenType.EOF
        assert isinstance(result.program[0], FunctionNode)

    def test_lexical_error_propagates(self):
        with pytest.raises(LexicalError):
            compile_quark("let x = @")

    def test_syntax_error_propagates(self):
        with pytest.raises(QuarkSyntaxError):
            compile_quark("let x 5")

    def test_codegen_error_propagates(self):
        with pytest.raises(CodeGenError):
            compile_quark("for x in xs -> f(x) end")

    def test_type_check_disabled_by_default(self):
        assert compile_quark('let s = "hi"') == 'int s = "hi";\n'

    def test_type_check_fills_annotations(self):
        options = CompilerOptions(type_check=True)
        result = QuarkCompiler(options).compile_source('let s = "hi"')
        assert result.c_source == 'char* s = "hi";\n'
        assert result.program[0] == LetStatement(
            "s", TYPE_STRING, result.program[0].initializer
        )

    def test_type_error_raised(self):
        options = CompilerOptions(type_check=True)
        with pytest.raises(QuarkTypeError, match="'s'"):
            compile_quark('let s: int = "hi"', options)

    def test_flat_operators(self):
        options = CompilerOptions(operator_precedence=False)
        assert compile_quark("let v = 1 * 2 + 3", options) == "int v = 1 * (2 + 3);\n"

    def test_generator_options_forwarded(self):
        options = CompilerOptions(inferred_type="long", indent="  ")
        assert compile_quark("fnc f() void -> let x = 1 end", options) == (
            "void f() {\n  long x = 1;\n}\n"
        )


# =============================================================================
# File Tests
# =============================================================================

class TestCompileFile:
    """Tests for file-based compilation."""

    def test_compile_file(self, tmp_path):
        source = tmp_path / "main.quark"
        source.write_text(MAIN_SOURCE, encoding="utf-8")
        assert compile_file(source) == MAIN_C

    def test_compile_file_writes_output(self, tmp_path):
        source = tmp_path / "main.quark"
        source.write_text(MAIN_SOURCE, encoding="utf-8")
        output = tmp_path / "main.c"
        compile_file(source, output)
        assert output.read_text(encoding="utf-8") == MAIN_C

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            QuarkCompiler().compile_file(tmp_path / "missing.quark")


# =============================================================================
# Native Build Tests (stubbed compiler)
# =============================================================================

class FakeCompiler:
    """Stands in for subprocess.run and records what it was asked to do."""

    def __init__(self, returncode: int = 0, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        self.commands: list[list[str]] = []
        self.seen_source: str = ""

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        with open(cmd[-3], encoding="utf-8") as f:
            self.seen_source = f.read()
        return subprocess.CompletedProcess(cmd, self.returncode, "", self.stderr)


class TestBuildExecutable:
    """Tests for QuarkCompiler.build_executable()."""

    def test_invokes_compiler(self, tmp_path, monkeypatch):
        fake = FakeCompiler()
        monkeypatch.setattr(subprocess, "run", fake)
        output = tmp_path / "app"

        built = QuarkCompiler().build_executable(MAIN_C, output)

        assert built == output
        (cmd,) = fake.commands
        assert cmd == ["cc", "-std=c99", str(tmp_path / "app.c"), "-o", str(output)]
        assert fake.seen_source == MAIN_C

    def test_intermediate_removed(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeCompiler())
        QuarkCompiler().build_executable(MAIN_C, tmp_path / "app")
        assert not (tmp_path / "app.c").exists()

    def test_intermediate_kept(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeCompiler())
        options = CompilerOptions(keep_intermediate=True)
        QuarkCompiler(options).build_executable(MAIN_C, tmp_path / "app")
        assert (tmp_path / "app.c").read_text(encoding="utf-8") == MAIN_C

    def test_custom_compiler_and_flags(self, tmp_path, monkeypatch):
        fake = FakeCompiler()
        monkeypatch.setattr(subprocess, "run", fake)
        options = CompilerOptions(c_compiler="clang", c_flags=["-O2"])
        QuarkCompiler(options).build_executable(MAIN_C, tmp_path / "app")
        assert fake.commands[0][:2] == ["clang", "-O2"]

    def test_compiler_failure(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run", FakeCompiler(returncode=1, stderr="app.c:1: error: oops\n")
        )
        with pytest.raises(BuildError) as exc_info:
            QuarkCompiler().build_executable(MAIN_C, tmp_path / "app")
        assert exc_info.value.return_code == 1
        assert "oops" in exc_info.value.stderr
        assert not (tmp_path / "app.c").exists()

    def test_compiler_missing(self, tmp_path, monkeypatch):
        def missing(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(subprocess, "run", missing)
        with pytest.raises(BuildError, match="not found"):
            QuarkCompiler().build_executable(MAIN_C, tmp_path / "app")

    def test_compiler_timeout(self, tmp_path, monkeypatch):
        def slow(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", slow)
        with pytest.raises(BuildError, match="timed out"):
            QuarkCompiler().build_executable(MAIN_C, tmp_path / "app")


# =============================================================================
# Native Build Tests (real compiler)
# =============================================================================

@pytest.mark.skipif(shutil.which("cc") is None, reason="no C compiler available")
class TestNativeBuild:
    """End-to-end builds with the system C compiler."""

    def test_exit_status(self, tmp_path):
        compiler = QuarkCompiler()
        result = compiler.compile_source(MAIN_SOURCE)
        binary = compiler.build_executable(result.c_source, tmp_path / "main")

        run = subprocess.run([str(binary)], capture_output=True, text=True)
        assert run.returncode == 7

    def test_print_output(self, tmp_path):
        source = """
        fnc main() int ->
            let total = 0
            for i in range(1, 4) ->
                total = total + i
            end
            print("sum", total)
            ret 0
        end
        """
        compiler = QuarkCompiler(CompilerOptions(type_check=True))
        result = compiler.compile_source(source)
        binary = compiler.build_executable(result.c_source, tmp_path / "sum")

        run = subprocess.run([str(binary)], capture_output=True, text=True)
        assert run.returncode == 0
        assert run.stdout == "sum 6"
