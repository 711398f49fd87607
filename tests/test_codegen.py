"""
Quark Code Generator Test Suite
===============================

Tests for quark.codegen: statement and expression translation, print
lowering, include assembly, options, and generation failures.

Test Organization
-----------------
- TestStatements: Functions, lets, returns, control flow
- TestForLoops: range() and array literal lowering
- TestExpressions: Operators, literals, calls
- TestPrint: printf lowering and <stdio.h>
- TestOptions: Placeholder type and indentation
- TestCodeGenErrors: Constructs with no C translation
"""

from dataclasses import dataclass

import pytest

from quark.codegen import CodeGenerator, Fragment, GeneratorOptions, c_type, generate
from quark.errors import CodeGenError
from quark.parser import parse_source
from quark.types import (
    TYPE_BOOL,
    TYPE_FLOAT,
    TYPE_INT,
    TYPE_STRING,
    TYPE_UNKNOWN,
    TYPE_VOID,
    array_of,
)
from quark.ast import (
    BlockStatement,
    BooleanLiteral,
    ExpressionStatement,
    FunctionNode,
    IdentifierExpression,
    LetStatement,
    NumberLiteral,
    ParameterNode,
    ReturnStatement,
    Statement,
    StringLiteral,
    TernaryExpression,
)


MAIN_SOURCE = """
fnc main() int ->
    let x = 5
    let y = x + 2
    ret y
end
"""


def c(source: str, **options) -> str:
    """Compile Quark source straight to C."""
    return generate(parse_source(source), GeneratorOptions(**options))


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Tests for statement translation."""

    def test_main_function(self):
        """The canonical example translates byte for byte."""
        assert c(MAIN_SOURCE) == (
            "int main() {\n"
            "int x = 5;\n"
            "int y = x + 2;\n"
            "return y;\n"
            "}\n"
        )

    def test_empty_program(self):
        assert generate(()) == ""

    def test_function_parameters(self):
        assert c("fnc add(a: int, b: float) float -> ret a + b end") == (
            "float add(int a, float b) {\n"
            "return a + b;\n"
            "}\n"
        )

    def test_array_parameter_is_pointer(self):
        assert c("fnc first(xs: [string]) string -> ret xs[0] end") == (
            "char* first(char** xs) {\n"
            "return xs[0];\n"
            "}\n"
        )

    def test_void_return(self):
        assert c("fnc f() void -> ret end") == "void f() {\nreturn;\n}\n"

    @pytest.mark.parametrize("annotation, c_name", [
        ("int", "int"),
        ("float", "float"),
        ("string", "char*"),
        ("bool", "int"),
    ])
    def test_annotated_let(self, annotation, c_name):
        assert c(f"let v: {annotation} = w") == f"{c_name} v = w;\n"

    def test_bool_literal_let(self):
        assert c("let b: bool = true") == "int b = 1;\n"

    def test_array_let(self):
        assert c("let xs: [int] = [1, 2, 3]") == "int xs[] = {1, 2, 3};\n"

    def test_array_let_from_expression(self):
        assert c("let ys: [int] = xs") == "int* ys = xs;\n"

    def test_unannotated_array_literal(self):
        assert c("let xs = [1, 2]") == "int xs[] = {1, 2};\n"

    def test_expression_statement(self):
        assert c("f(1)") == "f(1);\n"

    def test_if_else(self):
        assert c("fnc f(x: int) int -> if x < 3 -> ret 1 else ret 2 end end") == (
            "int f(int x) {\n"
            "if (x < 3) {\n"
            "return 1;\n"
            "} else {\n"
            "return 2;\n"
            "}\n"
            "}\n"
        )

    def test_if_without_else(self):
        assert c("if done -> ret end") == "if (done) {\nreturn;\n}\n"

    def test_while(self):
        assert c("while i < 10 -> i = i + 1 end") == (
            "while (i < 10) {\n"
            "i = (i + 1);\n"
            "}\n"
        )

    def test_block(self):
        program = (BlockStatement((ReturnStatement(NumberLiteral(0)),)),)
        assert generate(program) == "{\nreturn 0;\n}\n"

    def test_multiple_functions(self):
        source = """
        fnc double(n: int) int -> ret n * 2 end
        fnc main() int -> ret double(21) end
        """
        assert c(source) == (
            "int double(int n) {\nreturn n * 2;\n}\n"
            "int main() {\nreturn double(21);\n}\n"
        )


# =============================================================================
# For Loop Tests
# =============================================================================

class TestForLoops:
    """Tests for for-in lowering."""

    def test_range_end(self):
        assert c("for i in range(3) -> f(i) end") == (
            "for (int i = 0; i < 3; i++) {\n"
            "f(i);\n"
            "}\n"
        )

    def test_range_start_end(self):
        assert c("for i in range(1, n + 1) -> f(i) end") == (
            "for (int i = 1; i < n + 1; i++) {\n"
            "f(i);\n"
            "}\n"
        )

    def test_array_literal(self):
        assert c('for s in ["a", "b"] -> print(s) end') == (
            "#include <stdio.h>\n"
            "\n"
            "{\n"
            'char* __quark_arr0[] = {"a", "b"};\n'
            "for (int __quark_i1 = 0; __quark_i1 < 2; __quark_i1++) {\n"
            "char* s = __quark_arr0[__quark_i1];\n"
            'printf("%s", s);\n'
            "}\n"
            "}\n"
        )

    def test_temporary_names_unique_within_program(self):
        output = c("for a in [1] -> f(a) end for b in [2] -> f(b) end")
        assert "__quark_arr0" in output
        assert "__quark_arr2" in output

    def test_range_argument_count(self):
        with pytest.raises(CodeGenError, match="range"):
            c("for i in range(1, 2, 3) -> f(i) end")

    def test_unknown_length_iterable(self):
        with pytest.raises(CodeGenError, match="Cannot iterate"):
            c("for x in xs -> f(x) end")


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Tests for expression translation."""

    def test_nested_operands_parenthesized(self):
        assert c("let v = 1 + 2 * 3") == "int v = 1 + (2 * 3);\n"

    def test_left_nested_operands_parenthesized(self):
        assert c("let v = (1 + 2) * 3") == "int v = (1 + 2) * 3;\n"

    def test_flat_chain_grouping_preserved(self):
        program = parse_source("let v = 1 * 2 + 3", precedence=False)
        assert generate(program) == "int v = 1 * (2 + 3);\n"

    def test_unary_minus(self):
        assert c("let v = -x") == "int v = -x;\n"
        assert c("let v = -(a + b)") == "int v = -(a + b);\n"

    def test_double_negation(self):
        assert c("let v = --x") == "int v = -(-x);\n"

    def test_subscripted_call(self):
        assert c("let y = f(x)[0]") == "int y = f(x)[0];\n"

    def test_booleans(self):
        assert c("f(true, false)") == "f(1, 0);\n"

    def test_string_escapes(self):
        program = (ExpressionStatement(StringLiteral("a\nb\tc\rd")),)
        assert generate(program) == '"a\\nb\\tc\\rd";\n'

    def test_string_backslash_verbatim(self):
        assert c('f("a\\n")') == 'f("a\\n");\n'

    def test_subscript(self):
        assert c("let v = xs[i + 1]") == "int v = xs[i + 1];\n"

    def test_array_literal_argument(self):
        assert c("f([1, 2])") == "f({1, 2});\n"

    def test_ternary(self):
        program = (ExpressionStatement(TernaryExpression(
            IdentifierExpression("c"), NumberLiteral(1), NumberLiteral(2)
        )),)
        assert generate(program) == "((c) ? (1) : (2));\n"

    def test_comparison(self):
        assert c("let ok = a != b") == "int ok = a != b;\n"


# =============================================================================
# Print Tests
# =============================================================================

class TestPrint:
    """Tests for print() lowering."""

    def test_print_identifier(self):
        source = "fnc main() int -> let y = 7 print(y) ret 0 end"
        output = c(source)
        assert output.startswith("#include <stdio.h>\n\n")
        assert 'printf("%d", y)' in output

    def test_print_string_literal(self):
        assert 'printf("%s", "hi")' in c('print("hi")')

    def test_print_multiple_arguments(self):
        assert 'printf("%d %s", 1, "a");' in c('print(1, "a")')

    def test_print_typed_bindings(self):
        source = """
        fnc show(name: string, ratio: float, n: int, ok: bool) void ->
            print(name, ratio, n, ok)
        end
        """
        assert 'printf("%s %f %d %d", name, ratio, n, ok);' in c(source)

    def test_print_string_array_element(self):
        assert 'printf("%s", xs[0])' in c("fnc f(xs: [string]) void -> print(xs[0]) end")

    def test_print_unknown_defaults_to_int(self):
        assert 'printf("%d", g())' in c("print(g())")

    def test_print_without_arguments(self):
        assert 'printf("");' in c("print()")

    def test_no_include_without_print(self):
        assert "#include" not in c(MAIN_SOURCE)

    def test_include_emitted_once(self):
        output = c("print(1) print(2)")
        assert output.count("#include <stdio.h>") == 1
        assert output == (
            "#include <stdio.h>\n"
            "\n"
            'printf("%d", 1);\n'
            'printf("%d", 2);\n'
        )

    def test_print_scope_ends_with_function(self):
        """Parameter types do not leak into later functions."""
        source = """
        fnc a(s: string) void -> print(s) end
        fnc b(s: int) void -> print(s) end
        """
        output = c(source)
        assert 'printf("%s", s)' in output
        assert 'printf("%d", s)' in output


# =============================================================================
# Option Tests
# =============================================================================

class TestOptions:
    """Tests for GeneratorOptions."""

    def test_inferred_type(self):
        assert c("let x = 5", inferred_type="long") == "long x = 5;\n"

    def test_indent(self):
        assert c("fnc f() int -> if x -> ret 1 end ret 0 end", indent="    ") == (
            "int f() {\n"
            "    if (x) {\n"
            "        return 1;\n"
            "    }\n"
            "    return 0;\n"
            "}\n"
        )

    def test_generation_idempotent(self):
        program = parse_source('for s in ["a"] -> print(s) end ' + MAIN_SOURCE)
        generator = CodeGenerator()
        assert generator.generate(program) == generator.generate(program)


# =============================================================================
# Error Tests
# =============================================================================

@dataclass(frozen=True)
class GotoStatement(Statement):
    label: str


class TestCodeGenErrors:
    """Tests for generation failures."""

    def test_unknown_let_type(self):
        program = (LetStatement("x", TYPE_UNKNOWN, NumberLiteral(1)),)
        with pytest.raises(CodeGenError, match="Unknown type"):
            generate(program)

    def test_unknown_array_element_type(self):
        program = (FunctionNode(
            "f", (ParameterNode("xs", array_of(TYPE_UNKNOWN)),), TYPE_VOID, ()
        ),)
        with pytest.raises(CodeGenError, match="Unknown type"):
            generate(program)

    def test_unhandled_statement(self):
        with pytest.raises(CodeGenError, match="Unhandled statement type: GotoStatement"):
            generate((GotoStatement("top"),))

    def test_nested_function(self):
        with pytest.raises(CodeGenError, match="top level"):
            c("fnc outer() void -> fnc inner() void -> end end")

    def test_void_variable(self):
        with pytest.raises(CodeGenError, match="void"):
            c("let v: void = 1")

    def test_error_string(self):
        with pytest.raises(CodeGenError) as exc_info:
            generate((LetStatement("x", TYPE_UNKNOWN, NumberLiteral(1)),))
        assert str(exc_info.value) == "Code generation error: Unknown type"


# =============================================================================
# Helper Tests
# =============================================================================

class TestHelpers:
    """Tests for type mapping and fragments."""

    @pytest.mark.parametrize("quark_type, expected", [
        (TYPE_INT, "int"),
        (TYPE_FLOAT, "float"),
        (TYPE_STRING, "char*"),
        (TYPE_BOOL, "int"),
        (TYPE_VOID, "void"),
        (array_of(TYPE_INT), "int*"),
        (array_of(array_of(TYPE_STRING)), "char***"),
    ])
    def test_c_type(self, quark_type, expected):
        assert c_type(quark_type) == expected

    def test_fragment_merges_includes(self):
        a = Fragment("a", frozenset({"stdio.h"}))
        b = Fragment("b", frozenset({"math.h"}))
        assert a + b == Fragment("ab", frozenset({"stdio.h", "math.h"}))
        assert "x" + a + "y" == Fragment("xay", frozenset({"stdio.h"}))

    def test_fragment_join(self):
        joined = Fragment.join([Fragment("a"), Fragment("b", frozenset({"h"}))], ", ")
        assert joined == Fragment("a, b", frozenset({"h"}))

    def test_boolean_literal_node(self):
        assert generate((ExpressionStatement(BooleanLiteral(True)),)) == "1;\n"
