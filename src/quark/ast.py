"""
Quark Abstract Syntax Tree (AST) Definitions
============================================

This module defines the AST node types produced by the Quark parser and
consumed by the type checker and the C code generator.

Node Hierarchy
--------------
ASTNode (base)
├── Statements
│   ├── LetStatement - variable binding with optional type annotation
│   ├── ReturnStatement - ret with optional value
│   ├── IfStatement - if/else
│   ├── WhileStatement - while loop
│   ├── ForStatement - for <name> in <iterable>
│   ├── FunctionNode - function definition
│   ├── BlockStatement - statement sequence
│   └── ExpressionStatement - expression evaluated for its effect
├── ParameterNode - function parameter
└── Expressions
    ├── NumberLiteral - integer constant
    ├── StringLiteral - string constant
    ├── BooleanLiteral - true / false
    ├── IdentifierExpression - variable reference
    ├── BinaryExpression - binary operator
    ├── UnaryExpression - unary minus
    ├── CallExpression - function call
    ├── ArrayLiteral - [a, b, c]
    ├── ArraySubscript - array indexing a[i]
    └── TernaryExpression - conditional expression

A parsed program is a plain tuple of statements.

Design Notes
------------
- All nodes are frozen dataclasses; child sequences are tuples
- Each node exclusively owns its children, so the tree has no sharing
- Nodes carry no source locations
- Rewriting passes build new trees with dataclasses.replace()
"""

from dataclasses import dataclass, fields
from typing import Any, Optional

from quark.types import QuarkType


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""


@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for all expression nodes."""


@dataclass(frozen=True)
class Statement(ASTNode):
    """Base class for all statement nodes."""


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberLiteral(Expression):
    """Integer literal expression."""
    value: int


@dataclass(frozen=True)
class StringLiteral(Expression):
    """
    String literal expression.

    Attributes:
        value: The raw characters between the quotes
    """
    value: str


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool


@dataclass(frozen=True)
class IdentifierExpression(Expression):
    """Variable reference expression."""
    name: str


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Attributes:
        left: Left operand expression
        operator: Operator symbol, e.g. '+', '==', '='
        right: Right operand expression
    """
    left: Expression
    operator: str
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """Prefix operation expression (op x)."""
    operator: str
    operand: Expression


@dataclass(frozen=True)
class CallExpression(Expression):
    """
    Function call expression.

    Attributes:
        function_name: Name of the called function
        arguments: Positional argument expressions
    """
    function_name: str
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    """Array literal expression ([a, b, c])."""
    elements: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ArraySubscript(Expression):
    """
    Array subscript expression (array[index]).

    Attributes:
        array: The array expression
        index: The index expression
    """
    array: Expression
    index: Expression


@dataclass(frozen=True)
class TernaryExpression(Expression):
    """
    Conditional expression.

    No surface syntax produces this node; it exists for AST rewriting
    passes and is rendered as C's ?: operator.

    Attributes:
        condition: The condition expression
        then_expr: Value if the condition is true
        else_expr: Value if the condition is false
    """
    condition: Expression
    then_expr: Expression
    else_expr: Expression


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class LetStatement(Statement):
    """
    Variable binding (let name [: type] = initializer).

    Attributes:
        name: The bound name
        type_annotation: Declared type, or None if not annotated
        initializer: The initial value
    """
    name: str
    type_annotation: Optional[QuarkType]
    initializer: Expression


@dataclass(frozen=True)
class ReturnStatement(Statement):
    """Return statement (ret [value])."""
    value: Optional[Expression] = None


@dataclass(frozen=True)
class IfStatement(Statement):
    """
    If statement with optional else branch.

    Attributes:
        condition: The condition expression
        then_body: Statements executed when the condition holds
        else_body: Statements of the else branch, or None
    """
    condition: Expression
    then_body: tuple[Statement, ...]
    else_body: Optional[tuple[Statement, ...]] = None


@dataclass(frozen=True)
class WhileStatement(Statement):
    condition: Expression
    body: tuple[Statement, ...]


@dataclass(frozen=True)
class ForStatement(Statement):
    """
    For-in loop (for iterator in iterable -> body end).

    Attributes:
        iterator: Name bound to each element in turn
        iterable: Expression producing the elements
        body: Loop body statements
    """
    iterator: str
    iterable: Expression
    body: tuple[Statement, ...]


@dataclass(frozen=True)
class ParameterNode(ASTNode):
    """Function parameter (name and declared type)."""
    name: str
    param_type: QuarkType


@dataclass(frozen=True)
class FunctionNode(Statement):
    """
    Function definition.

    Attributes:
        name: Function name
        parameters: Parameters in declaration order
        return_type: Declared return type
        body: Function body statements
    """
    name: str
    parameters: tuple[ParameterNode, ...]
    return_type: QuarkType
    body: tuple[Statement, ...]


@dataclass(frozen=True)
class BlockStatement(Statement):
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """Expression evaluated for its side effects (e.g. a call)."""
    expression: Expression


# =============================================================================
# AST Visitor
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches on the node class name to visit_<ClassName>. Subclasses
    override the methods for the node types they care about; everything
    else falls through to generic_visit, which walks the children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_CallExpression(self, node):
                self.calls += 1
                self.generic_visit(node)

        counter = CallCounter()
        counter.visit_all(program)
    """

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a node by dispatching to the appropriate method.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by visitor)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def visit_all(self, nodes: tuple[ASTNode, ...]) -> list[Any]:
        """Visit a sequence of nodes, returning the results in order."""
        return [self.visit(node) for node in nodes]

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes, including those held in tuples."""
        for f in fields(node):
            value = getattr(node, f.name)
            if isinstance(value, ASTNode):
                self.visit(value)
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(program))

    Output:
        Function: int main()
          Let x = 5
          Let y = (x + 2)
          Return y
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, program: tuple[Statement, ...]) -> str:
        """Print a program (or a single node) and return it as a string."""
        self.output = []
        self.indent_level = 0
        if isinstance(program, ASTNode):
            self.visit(program)
        else:
            self.visit_all(program)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        self.output.append(f"{'  ' * self.indent_level}{text}")

    def _body(self, statements: tuple[Statement, ...]) -> None:
        self.indent_level += 1
        self.visit_all(statements)
        self.indent_level -= 1

    def visit_FunctionNode(self, node: FunctionNode):
        params = ", ".join(f"{p.name}: {p.param_type}" for p in node.parameters)
        self._emit(f"Function: {node.return_type} {node.name}({params})")
        self._body(node.body)

    def visit_LetStatement(self, node: LetStatement):
        annotation = f": {node.type_annotation}" if node.type_annotation else ""
        self._emit(f"Let {node.name}{annotation} = {self._expr_str(node.initializer)}")

    def visit_ReturnStatement(self, node: ReturnStatement):
        if node.value is not None:
            self._emit(f"Return {self._expr_str(node.value)}")
        else:
            self._emit("Return")

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If ({self._expr_str(node.condition)})")
        self._body(node.then_body)
        if node.else_body is not None:
            self._emit("Else")
            self._body(node.else_body)

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit(f"While ({self._expr_str(node.condition)})")
        self._body(node.body)

    def visit_ForStatement(self, node: ForStatement):
        self._emit(f"For {node.iterator} in {self._expr_str(node.iterable)}")
        self._body(node.body)

    def visit_BlockStatement(self, node: BlockStatement):
        self._emit("Block")
        self._body(node.statements)

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"Expr: {self._expr_str(node.expression)}")

    def _expr_str(self, expr: Expression) -> str:
        """Convert an expression to a fully parenthesized string."""
        if isinstance(expr, NumberLiteral):
            return str(expr.value)
        if isinstance(expr, StringLiteral):
            return f'"{expr.value}"'
        if isinstance(expr, BooleanLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, IdentifierExpression):
            return expr.name
        if isinstance(expr, BinaryExpression):
            return (
                f"({self._expr_str(expr.left)} {expr.operator} "
                f"{self._expr_str(expr.right)})"
            )
        if isinstance(expr, UnaryExpression):
            return f"{expr.operator}{self._expr_str(expr.operand)}"
        if isinstance(expr, CallExpression):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{expr.function_name}({args})"
        if isinstance(expr, ArrayLiteral):
            return f"[{', '.join(self._expr_str(e) for e in expr.elements)}]"
        if isinstance(expr, ArraySubscript):
            return f"{self._expr_str(expr.array)}[{self._expr_str(expr.index)}]"
        if isinstance(expr, TernaryExpression):
            return (
                f"({self._expr_str(expr.condition)} ? "
                f"{self._expr_str(expr.then_expr)} : "
                f"{self._expr_str(expr.else_expr)})"
            )
        return f"<{expr.__class__.__name__}>"
