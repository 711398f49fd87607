"""
C Code Generator for Quark
==========================

This module translates a parsed Quark program into C99 source text.

Generation Strategy
-------------------
Every statement and expression translates to a Fragment: the C text
plus the set of headers that text needs. Fragments combine by
concatenating text and taking the union of includes, so the header set
of the whole program falls out of the translation without any shared
flag. After the last statement the required headers are emitted first,
sorted, followed by a blank line and the statement text.

Statement Translation
---------------------
| Quark                           | C                                      |
|---------------------------------|----------------------------------------|
| fnc f(x: int) int -> ... end    | int f(int x) {\\n...}\\n                 |
| let x: int = e                  | int x = e;\\n                           |
| let x = e                       | <placeholder> x = e;\\n                 |
| let xs: [int] = [1, 2]          | int xs[] = {1, 2};\\n                   |
| ret e / ret                     | return e;\\n / return;\\n                |
| if c -> ... else ... end        | if (c) {\\n...} else {\\n...}\\n          |
| while c -> ... end              | while (c) {\\n...}\\n                    |
| for i in range(a, b) -> ... end | for (int i = a; i < b; i++) {\\n...}\\n  |
| e                               | e;\\n                                   |

The placeholder type for unannotated bindings is a fixed option
(default "int"). The generator does no inference of its own; run a
TypeChecker first to fill in annotations.

Expression Translation
----------------------
- Literals verbatim; true/false become 1/0
- Compound operands of binary operators are parenthesized, so the C
  grouping always matches the tree: 1 + (2 * 3)
- print(a, b) becomes printf("%d %d", a, b) and pulls in <stdio.h>

Usage
-----
>>> from quark.parser import parse_source
>>> from quark.codegen import CodeGenerator
>>> program = parse_source('fnc main() int -> ret 0 end')
>>> print(CodeGenerator().generate(program))
int main() {
return 0;
}
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from quark.errors import CodeGenError
from quark.checker import infer_literal_type
from quark.types import (
    C_TYPE_NAMES,
    QuarkType,
    TypeKind,
    TYPE_INT,
)
from quark.ast import (
    ArrayLiteral,
    ArraySubscript,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    Expression,
    ExpressionStatement,
    ForStatement,
    FunctionNode,
    IdentifierExpression,
    IfStatement,
    LetStatement,
    NumberLiteral,
    ReturnStatement,
    Statement,
    StringLiteral,
    TernaryExpression,
    UnaryExpression,
    WhileStatement,
)

logger = logging.getLogger(__name__)

STDIO_HEADER = "stdio.h"

# printf conversion per statically known argument type
PRINTF_FORMATS: dict[TypeKind, str] = {
    TypeKind.STRING: "%s",
    TypeKind.FLOAT: "%f",
}
DEFAULT_PRINTF_FORMAT = "%d"

# Raw control characters that must be escaped inside a C string literal
_STRING_ESCAPES = {
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}

# Map of names in scope to their declared type (None: not annotated)
Scope = dict[str, Optional[QuarkType]]


# =============================================================================
# Output Fragments
# =============================================================================

@dataclass(frozen=True)
class Fragment:
    """
    A piece of generated C text and the headers it requires.

    Attributes:
        text: Generated C source
        includes: Header names (e.g. 'stdio.h') the text depends on
    """
    text: str
    includes: frozenset[str] = frozenset()

    def __add__(self, other: Union["Fragment", str]) -> "Fragment":
        if isinstance(other, str):
            return Fragment(self.text + other, self.includes)
        return Fragment(self.text + other.text, self.includes | other.includes)

    def __radd__(self, other: str) -> "Fragment":
        return Fragment(other + self.text, self.includes)

    @staticmethod
    def join(fragments: Iterable["Fragment"], separator: str = "") -> "Fragment":
        """Concatenate fragments with a separator, merging their includes."""
        fragments = list(fragments)
        includes = frozenset().union(*(f.includes for f in fragments))
        return Fragment(separator.join(f.text for f in fragments), includes)


# =============================================================================
# Generator Options
# =============================================================================

@dataclass
class GeneratorOptions:
    """
    Configuration for C code generation.

    Attributes:
        inferred_type: C type emitted for let bindings without an
            annotation
        indent: Text repeated once per nesting level in front of each
            statement. Empty by default, so nested statements start at
            column 0.
    """
    inferred_type: str = "int"
    indent: str = ""


def c_type(quark_type: QuarkType) -> str:
    """
    Map a Quark type onto its C spelling.

    Raises:
        CodeGenError: For the Unknown type, at any nesting depth
    """
    if quark_type.kind == TypeKind.UNKNOWN:
        raise CodeGenError("Unknown type")
    if quark_type.kind == TypeKind.ARRAY:
        return f"{c_type(quark_type.element)}*"
    return C_TYPE_NAMES[quark_type.kind]


def escape_string(value: str) -> str:
    """Escape raw newline, tab, and carriage return characters."""
    return "".join(_STRING_ESCAPES.get(ch, ch) for ch in value)


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates C99 source from a Quark program.

    A generator holds only its options and a temporary-name counter
    that is reset by every generate() call, so one instance may be used
    for any number of programs and always produces the same output for
    the same program.

    Usage:
        generator = CodeGenerator(GeneratorOptions(indent="    "))
        c_source = generator.generate(program)
    """

    def __init__(self, options: Optional[GeneratorOptions] = None):
        self.options = options or GeneratorOptions()
        self._temp_counter = 0

    def generate(self, program: tuple[Statement, ...]) -> str:
        """
        Generate C source from a program.

        Args:
            program: Top-level statements from the parser

        Returns:
            Complete C source text

        Raises:
            CodeGenError: If a construct cannot be expressed in C
        """
        self._temp_counter = 0

        scope: Scope = {}
        body = Fragment.join(self._statement(s, scope, 0) for s in program)

        if not body.includes:
            output = body.text
        else:
            headers = "".join(f"#include <{h}>\n" for h in sorted(body.includes))
            output = headers + "\n" + body.text

        logger.debug(
            f"Generated {len(output)} bytes of C from {len(program)} statements"
        )
        return output

    # =========================================================================
    # Helpers
    # =========================================================================

    def _prefix(self, depth: int) -> str:
        return self.options.indent * depth

    def _new_temp(self, prefix: str) -> str:
        name = f"__quark_{prefix}{self._temp_counter}"
        self._temp_counter += 1
        return name

    def _block(
        self,
        statements: tuple[Statement, ...],
        scope: Scope,
        depth: int,
    ) -> Fragment:
        """Translate a body in a child scope, one level deeper."""
        inner = dict(scope)
        return Fragment.join(self._statement(s, inner, depth + 1) for s in statements)

    def _static_type(self, expr: Expression, scope: Scope) -> Optional[QuarkType]:
        """Type of an expression when it is visible without inference."""
        literal = infer_literal_type(expr)
        if literal is not None:
            return literal
        if isinstance(expr, IdentifierExpression):
            return scope.get(expr.name)
        if isinstance(expr, ArraySubscript):
            array_type = self._static_type(expr.array, scope)
            if array_type is not None and array_type.is_array:
                return array_type.element
        return None

    # =========================================================================
    # Statements
    # =========================================================================

    def _statement(self, stmt: Statement, scope: Scope, depth: int) -> Fragment:
        if isinstance(stmt, FunctionNode):
            return self._function(stmt, scope, depth)
        if isinstance(stmt, LetStatement):
            return self._let(stmt, scope, depth)
        if isinstance(stmt, ReturnStatement):
            return self._return(stmt, scope, depth)
        if isinstance(stmt, IfStatement):
            return self._if(stmt, scope, depth)
        if isinstance(stmt, WhileStatement):
            return self._while(stmt, scope, depth)
        if isinstance(stmt, ForStatement):
            return self._for(stmt, scope, depth)
        if isinstance(stmt, BlockStatement):
            prefix = self._prefix(depth)
            body = self._block(stmt.statements, scope, depth)
            return f"{prefix}{{\n" + body + f"{prefix}}}\n"
        if isinstance(stmt, ExpressionStatement):
            return self._prefix(depth) + self._expression(stmt.expression, scope) + ";\n"

        raise CodeGenError(f"Unhandled statement type: {stmt.__class__.__name__}")

    def _function(self, func: FunctionNode, scope: Scope, depth: int) -> Fragment:
        if depth > 0:
            raise CodeGenError(
                f"Function '{func.name}' must be defined at top level",
                hint="C has no nested functions",
            )

        params = ", ".join(f"{c_type(p.param_type)} {p.name}" for p in func.parameters)
        header = f"{c_type(func.return_type)} {func.name}({params}) {{\n"

        inner = dict(scope)
        inner.update((p.name, p.param_type) for p in func.parameters)
        body = Fragment.join(self._statement(s, inner, depth + 1) for s in func.body)

        return header + body + "}\n"

    def _let(self, stmt: LetStatement, scope: Scope, depth: int) -> Fragment:
        prefix = self._prefix(depth)
        annotation = stmt.type_annotation
        initializer = self._expression(stmt.initializer, scope)
        scope[stmt.name] = annotation

        if annotation is None:
            type_name = self.options.inferred_type
            if isinstance(stmt.initializer, ArrayLiteral):
                return f"{prefix}{type_name} {stmt.name}[] = " + initializer + ";\n"
            return f"{prefix}{type_name} {stmt.name} = " + initializer + ";\n"

        if annotation.kind == TypeKind.VOID:
            raise CodeGenError(f"Variable '{stmt.name}' cannot have type void")

        if annotation.is_array and isinstance(stmt.initializer, ArrayLiteral):
            element = c_type(annotation.element)
            return f"{prefix}{element} {stmt.name}[] = " + initializer + ";\n"

        return f"{prefix}{c_type(annotation)} {stmt.name} = " + initializer + ";\n"

    def _return(self, stmt: ReturnStatement, scope: Scope, depth: int) -> Fragment:
        prefix = self._prefix(depth)
        if stmt.value is None:
            return Fragment(f"{prefix}return;\n")
        return f"{prefix}return " + self._expression(stmt.value, scope) + ";\n"

    def _if(self, stmt: IfStatement, scope: Scope, depth: int) -> Fragment:
        prefix = self._prefix(depth)
        condition = self._expression(stmt.condition, scope)
        result = f"{prefix}if (" + condition + ") {\n"
        result += self._block(stmt.then_body, scope, depth)
        if stmt.else_body is not None:
            result += f"{prefix}}} else {{\n"
            result += self._block(stmt.else_body, scope, depth)
        return result + f"{prefix}}}\n"

    def _while(self, stmt: WhileStatement, scope: Scope, depth: int) -> Fragment:
        prefix = self._prefix(depth)
        condition = self._expression(stmt.condition, scope)
        body = self._block(stmt.body, scope, depth)
        return f"{prefix}while (" + condition + ") {\n" + body + f"{prefix}}}\n"

    def _for(self, stmt: ForStatement, scope: Scope, depth: int) -> Fragment:
        """
        Translate a for-in loop.

        Only iterables with a length known at translation time can be
        lowered: range(end), range(start, end) and array literals.
        """
        iterable = stmt.iterable
        if isinstance(iterable, CallExpression) and iterable.function_name == "range":
            return self._for_range(stmt, iterable, scope, depth)
        if isinstance(iterable, ArrayLiteral):
            return self._for_array(stmt, iterable, scope, depth)

        raise CodeGenError(
            f"Cannot iterate over {iterable.__class__.__name__} in for loop",
            hint="iterate over range(n), range(start, end) or an array literal",
        )

    def _for_range(
        self,
        stmt: ForStatement,
        call: CallExpression,
        scope: Scope,
        depth: int,
    ) -> Fragment:
        if len(call.arguments) == 1:
            start, end = Fragment("0"), self._expression(call.arguments[0], scope)
        elif len(call.arguments) == 2:
            start = self._expression(call.arguments[0], scope)
            end = self._expression(call.arguments[1], scope)
        else:
            raise CodeGenError(
                f"range() takes 1 or 2 arguments, got {len(call.arguments)}"
            )

        prefix = self._prefix(depth)
        name = stmt.iterator
        inner = dict(scope)
        inner[name] = TYPE_INT
        header = (
            f"{prefix}for (int {name} = " + start + f"; {name} < " + end
            + f"; {name}++) {{\n"
        )
        body = Fragment.join(self._statement(s, inner, depth + 1) for s in stmt.body)
        return header + body + f"{prefix}}}\n"

    def _for_array(
        self,
        stmt: ForStatement,
        array: ArrayLiteral,
        scope: Scope,
        depth: int,
    ) -> Fragment:
        """
        Lower iteration over an array literal to an index loop.

            {
            int __quark_arr0[] = {1, 2};
            for (int __quark_i1 = 0; __quark_i1 < 2; __quark_i1++) {
            int x = __quark_arr0[__quark_i1];
            ...
            }
            }
        """
        array_type = infer_literal_type(array)
        element_type = array_type.element if array_type is not None else None
        element_c = (
            c_type(element_type) if element_type is not None
            else self.options.inferred_type
        )

        outer = self._prefix(depth)
        loop = self._prefix(depth + 1)
        body_prefix = self._prefix(depth + 2)
        array_name = self._new_temp("arr")
        index_name = self._new_temp("i")

        result = Fragment(f"{outer}{{\n")
        result += f"{loop}{element_c} {array_name}[] = " + self._expression(array, scope)
        result += ";\n"
        result += (
            f"{loop}for (int {index_name} = 0; {index_name} < {len(array.elements)}; "
            f"{index_name}++) {{\n"
        )
        result += (
            f"{body_prefix}{element_c} {stmt.iterator} = "
            f"{array_name}[{index_name}];\n"
        )

        inner = dict(scope)
        inner[stmt.iterator] = element_type
        result += Fragment.join(
            self._statement(s, inner, depth + 2) for s in stmt.body
        )
        return result + f"{loop}}}\n" + f"{outer}}}\n"

    # =========================================================================
    # Expressions
    # =========================================================================

    def _expression(self, expr: Expression, scope: Scope) -> Fragment:
        if isinstance(expr, NumberLiteral):
            return Fragment(str(expr.value))
        if isinstance(expr, StringLiteral):
            return Fragment(f'"{escape_string(expr.value)}"')
        if isinstance(expr, BooleanLiteral):
            return Fragment("1" if expr.value else "0")
        if isinstance(expr, IdentifierExpression):
            return Fragment(expr.name)
        if isinstance(expr, BinaryExpression):
            left = self._operand(expr.left, scope)
            right = self._operand(expr.right, scope)
            return left + f" {expr.operator} " + right
        if isinstance(expr, UnaryExpression):
            return expr.operator + self._operand(expr.operand, scope, unary=True)
        if isinstance(expr, CallExpression):
            return self._call(expr, scope)
        if isinstance(expr, ArrayLiteral):
            elements = Fragment.join(
                (self._expression(e, scope) for e in expr.elements), ", "
            )
            return "{" + elements + "}"
        if isinstance(expr, ArraySubscript):
            array = self._operand(expr.array, scope)
            return array + "[" + self._expression(expr.index, scope) + "]"
        if isinstance(expr, TernaryExpression):
            condition = self._expression(expr.condition, scope)
            then_expr = self._expression(expr.then_expr, scope)
            else_expr = self._expression(expr.else_expr, scope)
            return "((" + condition + ") ? (" + then_expr + ") : (" + else_expr + "))"

        raise CodeGenError(f"Unhandled expression type: {expr.__class__.__name__}")

    def _operand(self, expr: Expression, scope: Scope, unary: bool = False) -> Fragment:
        """Translate an operand, parenthesizing compound expressions."""
        text = self._expression(expr, scope)
        compound = isinstance(expr, BinaryExpression)
        if unary:
            compound = compound or isinstance(expr, UnaryExpression)
        if compound:
            return "(" + text + ")"
        return text

    def _call(self, call: CallExpression, scope: Scope) -> Fragment:
        arguments = [self._expression(a, scope) for a in call.arguments]

        if call.function_name == "print":
            formats = " ".join(self._printf_format(a, scope) for a in call.arguments)
            result = Fragment(f'printf("{formats}"', frozenset({STDIO_HEADER}))
            for argument in arguments:
                result += ", " + argument
            return result + ")"

        return call.function_name + "(" + Fragment.join(arguments, ", ") + ")"

    def _printf_format(self, expr: Expression, scope: Scope) -> str:
        expr_type = self._static_type(expr, scope)
        if expr_type is None:
            return DEFAULT_PRINTF_FORMAT
        return PRINTF_FORMATS.get(expr_type.kind, DEFAULT_PRINTF_FORMAT)


# =============================================================================
# Convenience Function
# =============================================================================

def generate(
    program: tuple[Statement, ...],
    options: Optional[GeneratorOptions] = None,
) -> str:
    """
    Generate C source from a parsed program.

    Raises:
        CodeGenError: If a construct cannot be expressed in C
    """
    return CodeGenerator(options).generate(program)
