"""
Quark Type Checker Collaborators
================================

The code generator never infers types. When a let binding has no
annotation it falls back to a fixed placeholder C type. A TypeChecker
runs between parsing and code generation and may return a rewritten
program with annotations filled in, or report type failures.

Checkers
--------
- TypeChecker: abstract interface
- LiteralTypeChecker: resolves the annotations whose answer is visible
  in the initializer itself

LiteralTypeChecker Rules
------------------------
For an unannotated 'let name = init':

| Initializer                              | Annotation filled in |
|------------------------------------------|----------------------|
| integer literal, or '-' integer literal  | int                  |
| string literal                           | string               |
| true / false                             | bool                 |
| array literal of one literal type T      | [T]                  |
| identifier bound earlier with type T     | T                    |
| anything else                            | left unannotated     |

For an annotated binding whose initializer has a literal type, the two
types must agree ('int' may initialize 'float'). A mismatch is reported
as a QuarkTypeError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional

from quark.errors import QuarkTypeError
from quark.types import (
    QuarkType,
    TypeKind,
    TYPE_BOOL,
    TYPE_INT,
    TYPE_STRING,
    array_of,
)
from quark.ast import (
    ArrayLiteral,
    BlockStatement,
    BooleanLiteral,
    Expression,
    ForStatement,
    FunctionNode,
    IdentifierExpression,
    IfStatement,
    LetStatement,
    NumberLiteral,
    Statement,
    StringLiteral,
    UnaryExpression,
    WhileStatement,
)


def infer_literal_type(expr: Expression) -> Optional[QuarkType]:
    """
    Return the type of a literal expression, or None if it is not one.

    Array literals have a type only when non-empty and all elements
    share one literal type.
    """
    if isinstance(expr, NumberLiteral):
        return TYPE_INT
    if isinstance(expr, StringLiteral):
        return TYPE_STRING
    if isinstance(expr, BooleanLiteral):
        return TYPE_BOOL
    if isinstance(expr, UnaryExpression) and expr.operator == "-":
        if isinstance(expr.operand, NumberLiteral):
            return TYPE_INT
        return None
    if isinstance(expr, ArrayLiteral) and expr.elements:
        element_types = {infer_literal_type(e) for e in expr.elements}
        if len(element_types) == 1:
            (element,) = element_types
            if element is not None:
                return array_of(element)
    return None


def is_assignable(target: QuarkType, value: QuarkType) -> bool:
    """Check whether a value of one type may initialize a binding of another."""
    if target == value:
        return True
    if target.kind == TypeKind.FLOAT and value.kind == TypeKind.INT:
        return True
    if target.is_array and value.is_array:
        return is_assignable(target.element, value.element)
    return False


# =============================================================================
# Checker Interface
# =============================================================================

@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of a type checker run.

    Attributes:
        program: The (possibly rewritten) program
        errors: Type failures, in source order; empty on success
    """
    program: tuple[Statement, ...]
    errors: tuple[QuarkTypeError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


class TypeChecker(ABC):
    """
    Abstract base class for type checker collaborators.

    A checker receives a parsed program and returns a CheckResult. It
    must not modify the input; rewriting returns a new tree.
    """

    @abstractmethod
    def check(self, program: tuple[Statement, ...]) -> CheckResult:
        """Check (and possibly annotate) a program."""
        pass


# =============================================================================
# Literal Type Checker
# =============================================================================

class LiteralTypeChecker(TypeChecker):
    """
    Fills in let annotations that are obvious from the initializer.

    Scoping follows the generated C: function bodies and loop/branch
    bodies see the bindings of their enclosing scope, and bindings made
    inside a body are not visible after it.

    Usage:
        result = LiteralTypeChecker().check(program)
        if not result.ok:
            raise result.errors[0]
    """

    def check(self, program: tuple[Statement, ...]) -> CheckResult:
        errors: list[QuarkTypeError] = []
        checked = self._check_body(program, {}, errors)
        return CheckResult(checked, tuple(errors))

    def _check_body(
        self,
        statements: tuple[Statement, ...],
        scope: dict[str, QuarkType],
        errors: list[QuarkTypeError],
    ) -> tuple[Statement, ...]:
        return tuple(self._check_statement(s, scope, errors) for s in statements)

    def _check_statement(
        self,
        stmt: Statement,
        scope: dict[str, QuarkType],
        errors: list[QuarkTypeError],
    ) -> Statement:
        if isinstance(stmt, LetStatement):
            return self._check_let(stmt, scope, errors)

        if isinstance(stmt, FunctionNode):
            inner = dict(scope)
            inner.update((p.name, p.param_type) for p in stmt.parameters)
            return replace(stmt, body=self._check_body(stmt.body, inner, errors))

        if isinstance(stmt, IfStatement):
            then_body = self._check_body(stmt.then_body, dict(scope), errors)
            else_body = None
            if stmt.else_body is not None:
                else_body = self._check_body(stmt.else_body, dict(scope), errors)
            return replace(stmt, then_body=then_body, else_body=else_body)

        if isinstance(stmt, WhileStatement):
            return replace(stmt, body=self._check_body(stmt.body, dict(scope), errors))

        if isinstance(stmt, ForStatement):
            inner = dict(scope)
            iterable_type = infer_literal_type(stmt.iterable)
            if iterable_type is not None and iterable_type.is_array:
                inner[stmt.iterator] = iterable_type.element
            else:
                inner[stmt.iterator] = TYPE_INT
            return replace(stmt, body=self._check_body(stmt.body, inner, errors))

        if isinstance(stmt, BlockStatement):
            return replace(
                stmt, statements=self._check_body(stmt.statements, dict(scope), errors)
            )

        return stmt

    def _check_let(
        self,
        stmt: LetStatement,
        scope: dict[str, QuarkType],
        errors: list[QuarkTypeError],
    ) -> LetStatement:
        value_type = infer_literal_type(stmt.initializer)
        if value_type is None and isinstance(stmt.initializer, IdentifierExpression):
            value_type = scope.get(stmt.initializer.name)

        if stmt.type_annotation is None:
            if value_type is not None:
                stmt = replace(stmt, type_annotation=value_type)
        elif value_type is not None and not is_assignable(stmt.type_annotation, value_type):
            errors.append(QuarkTypeError(
                f"Cannot initialize '{stmt.name}' of type {stmt.type_annotation} "
                f"with a value of type {value_type}"
            ))

        if stmt.type_annotation is not None:
            scope[stmt.name] = stmt.type_annotation
        else:
            scope.pop(stmt.name, None)
        return stmt
