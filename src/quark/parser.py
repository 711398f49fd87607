"""
Quark Recursive Descent Parser
==============================

This module implements a recursive descent parser for the Quark
language. It takes the token list produced by the lexer and builds a
tuple of top-level statements.

Grammar (Simplified EBNF)
-------------------------
program     ::= statement* EOF
statement   ::= let_stmt | ret_stmt | fnc_def | if_stmt
              | while_stmt | for_stmt | expr

let_stmt    ::= 'let' IDENTIFIER (':' type)? '=' expr
ret_stmt    ::= 'ret' expr?
fnc_def     ::= 'fnc' IDENTIFIER '(' (param (',' param)*)? ')' type '->' body 'end'
param       ::= IDENTIFIER ':'? type
if_stmt     ::= 'if' expr '->' body ('else' '->'? body)? 'end'
while_stmt  ::= 'while' expr '->' body 'end'
for_stmt    ::= 'for' IDENTIFIER 'in' expr '->' body 'end'
body        ::= statement*

type        ::= 'int' | 'float' | 'string' | 'bool' | 'void' | '[' type ']'

expr        ::= primary (OPERATOR expr)*
primary     ::= NUMBER | STRING | 'true' | 'false'
              | IDENTIFIER ('(' args? ')' | ('[' expr ']')*)
              | '[' args? ']'
              | '-' primary
              | '(' expr ')'
args        ::= expr (',' expr)*

Operator Grouping
-----------------
By default binary operators are grouped by precedence (lowest first):

1. assignment   =          (right-associative)
2. equality     == !=
3. relational   < > <= >=
4. additive     + -
5. multiplicative * / %

With precedence=False the parser instead builds a flat right-nested
chain: 'a - b - c' becomes a - (b - c) and '1 + 2 * 3' becomes
1 + (2 * 3) regardless of operator.

Error Handling
--------------
The first grammar violation raises QuarkSyntaxError. There is no error
recovery; a failure at any depth propagates unchanged.

Example Usage
-------------
>>> from quark.parser import parse_source
>>> program = parse_source("let x = 5")
>>> program[0]
LetStatement(name='x', type_annotation=None, initializer=NumberLiteral(value=5))
"""

from typing import Optional

from quark.errors import QuarkSyntaxError
from quark.lexer import Token, TokenType, tokenize
from quark.types import QuarkType, array_of, type_from_name
from quark.ast import (
    ArrayLiteral,
    ArraySubscript,
    BinaryExpression,
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
    ParameterNode,
    ReturnStatement,
    Statement,
    StringLiteral,
    UnaryExpression,
    WhileStatement,
)


# Binary operator precedence (higher binds tighter)
BINARY_PRECEDENCE: dict[str, int] = {
    "=": 1,
    "==": 2, "!=": 2,
    "<": 3, ">": 3, "<=": 3, ">=": 3,
    "+": 4, "-": 4,
    "*": 5, "/": 5, "%": 5,
}

RIGHT_ASSOCIATIVE = frozenset({"="})

# Type keyword tokens and the scalar name each one denotes
_TYPE_KEYWORDS: dict[TokenType, str] = {
    TokenType.TYPE_INT: "int",
    TokenType.TYPE_FLOAT: "float",
    TokenType.TYPE_STRING: "string",
    TokenType.TYPE_BOOL: "bool",
}


class QuarkParser:
    """
    Recursive descent parser for Quark.

    The token list is never modified; parsing state is a single cursor
    that only moves forward. Each parser instance parses one program.

    Attributes:
        tokens: Tokens to parse, always ending with EOF
        precedence: Group binary operators by precedence (default) or
            as a flat right-nested chain
    """

    def __init__(self, tokens: list[Token], precedence: bool = True):
        """
        Initialize the parser.

        Args:
            tokens: Token list from the lexer
            precedence: False selects flat right-nested operator chains
        """
        self.tokens = tuple(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            self.tokens += (Token(TokenType.EOF, None),)
        self.precedence = precedence

        # Current position in token stream
        self._pos = 0

    def parse(self) -> tuple[Statement, ...]:
        """
        Parse the token stream into a program.

        Returns:
            Top-level statements in source order

        Raises:
            QuarkSyntaxError: On the first grammar violation
        """
        statements = []
        while not self._at_end():
            statements.append(self._parse_statement())
        return tuple(statements)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, offset: int = 0) -> Token:
        """Look at token at current position + offset (EOF past the end)."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self._peek()
        if not self._at_end():
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Consume current token if it matches one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """
        Expect and consume a specific token type.

        Raises:
            QuarkSyntaxError: If the current token has a different type
        """
        if self._check(token_type):
            return self._advance()
        raise QuarkSyntaxError(f"{message}, found {self._describe(self._peek())}")

    def _check_operator(self, symbol: str) -> bool:
        return self._peek().is_operator(symbol)

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.EOF:
            return "end of input"
        return f"'{token.value}'"

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement(self) -> Statement:
        token = self._peek()

        if token.type == TokenType.LET:
            return self._parse_let()
        if token.type == TokenType.RET:
            return self._parse_return()
        if token.type == TokenType.FNC:
            return self._parse_function()
        if token.type == TokenType.IF:
            return self._parse_if()
        if token.type == TokenType.WHILE:
            return self._parse_while()
        if token.type == TokenType.FOR:
            return self._parse_for()

        return ExpressionStatement(self._parse_expression())

    def _parse_block(self, *terminators: TokenType) -> tuple[Statement, ...]:
        """
        Parse statements until one of the terminators (not consumed).

        Raises:
            QuarkSyntaxError: If the input ends before a terminator
        """
        statements = []
        while not self._check(*terminators):
            if self._at_end():
                raise QuarkSyntaxError(
                    "Unexpected EOF in block",
                    hint="close the block with 'end'",
                )
            statements.append(self._parse_statement())
        return tuple(statements)

    def _parse_let(self) -> LetStatement:
        """Parse: let name [: type] = expr"""
        self._advance()  # consume 'let'

        name = self._match(TokenType.IDENTIFIER)
        if name is None:
            raise QuarkSyntaxError("Expected identifier after 'let'")

        annotation = None
        if self._match(TokenType.COLON):
            annotation = self._parse_type()

        if not self._check_operator("="):
            raise QuarkSyntaxError(
                "Expected '=' in let statement",
                hint="a let binding needs an initializer, e.g. 'let x = 5'",
            )
        self._advance()

        return LetStatement(name.value, annotation, self._parse_expression())

    def _parse_return(self) -> ReturnStatement:
        """Parse: ret [expr]"""
        self._advance()  # consume 'ret'
        if self._check(TokenType.END, TokenType.ELSE, TokenType.EOF):
            return ReturnStatement(None)
        return ReturnStatement(self._parse_expression())

    def _parse_function(self) -> FunctionNode:
        """Parse: fnc name(params) type -> body end"""
        self._advance()  # consume 'fnc'

        name = self._expect(TokenType.IDENTIFIER, "Expected function name after 'fnc'")
        self._expect(TokenType.LPAREN, "Expected '(' after function name")
        parameters = self._parse_parameter_list()
        self._expect(TokenType.RPAREN, "Expected ')' after parameters")

        return_type = self._parse_type()
        self._expect(TokenType.ARROW, "Expected '->' before function body")

        body = self._parse_block(TokenType.END)
        self._advance()  # consume 'end'

        return FunctionNode(name.value, parameters, return_type, body)

    def _parse_parameter_list(self) -> tuple[ParameterNode, ...]:
        """
        Parse function parameters up to (not including) ')'.

        Both 'x: int' and 'x int' are accepted.
        """
        parameters: list[ParameterNode] = []
        if self._check(TokenType.RPAREN):
            return ()

        while True:
            name = self._expect(TokenType.IDENTIFIER, "Expected parameter name")
            self._match(TokenType.COLON)
            parameters.append(ParameterNode(name.value, self._parse_type()))
            if not self._match(TokenType.COMMA):
                break

        return tuple(parameters)

    def _parse_if(self) -> IfStatement:
        """Parse: if cond -> body [else body] end"""
        self._advance()  # consume 'if'

        condition = self._parse_expression()
        self._expect(TokenType.ARROW, "Expected '->' after if condition")
        then_body = self._parse_block(TokenType.ELSE, TokenType.END)

        else_body = None
        if self._match(TokenType.ELSE):
            self._match(TokenType.ARROW)
            else_body = self._parse_block(TokenType.END)

        self._advance()  # consume 'end'
        return IfStatement(condition, then_body, else_body)

    def _parse_while(self) -> WhileStatement:
        """Parse: while cond -> body end"""
        self._advance()  # consume 'while'

        condition = self._parse_expression()
        self._expect(TokenType.ARROW, "Expected '->' after while condition")
        body = self._parse_block(TokenType.END)
        self._advance()  # consume 'end'

        return WhileStatement(condition, body)

    def _parse_for(self) -> ForStatement:
        """Parse: for name in iterable -> body end"""
        self._advance()  # consume 'for'

        iterator = self._match(TokenType.IDENTIFIER)
        if iterator is None:
            raise QuarkSyntaxError("Expected identifier after 'for'")

        keyword = self._match(TokenType.IDENTIFIER)
        if keyword is None or keyword.value != "in":
            raise QuarkSyntaxError("Expected 'in' after iterator in for loop")

        iterable = self._parse_expression()
        if not self._match(TokenType.ARROW):
            raise QuarkSyntaxError("Expected '->' before for loop body")

        body = self._parse_block(TokenType.END)
        self._advance()  # consume 'end'

        return ForStatement(iterator.value, iterable, body)

    # =========================================================================
    # Types
    # =========================================================================

    def _parse_type(self) -> QuarkType:
        """Parse a scalar type name or a bracketed array type."""
        token = self._peek()

        if token.type in _TYPE_KEYWORDS:
            self._advance()
            return type_from_name(_TYPE_KEYWORDS[token.type])

        if token.type == TokenType.IDENTIFIER:
            scalar = type_from_name(token.value)
            if scalar is not None:
                self._advance()
                return scalar

        if token.type == TokenType.LBRACKET:
            self._advance()
            element = self._parse_type()
            self._expect(TokenType.RBRACKET, "Expected ']' after array element type")
            return array_of(element)

        raise QuarkSyntaxError(
            f"Expected type, found {self._describe(token)}",
            hint="types are int, float, string, bool, void or [T]",
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self, min_precedence: int = 1) -> Expression:
        if not self.precedence:
            return self._parse_flat_chain()

        left = self._parse_primary()

        while self._check(TokenType.OPERATOR):
            operator = self._peek().value
            precedence = BINARY_PRECEDENCE.get(operator)
            if precedence is None:
                raise QuarkSyntaxError(f"Unknown operator '{operator}'")
            if precedence < min_precedence:
                break
            self._advance()

            next_min = precedence if operator in RIGHT_ASSOCIATIVE else precedence + 1
            right = self._parse_expression(next_min)
            left = BinaryExpression(left, operator, right)

        return left

    def _parse_flat_chain(self) -> Expression:
        """Parse 'primary (op expr)?' with the right side taking the rest."""
        left = self._parse_primary()
        if self._check(TokenType.OPERATOR):
            operator = self._advance().value
            return BinaryExpression(left, operator, self._parse_flat_chain())
        return left

    def _parse_primary(self) -> Expression:
        """Parse literals, identifiers, calls, subscripts, arrays, negation."""
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(token.value)

        if token.type == TokenType.STRING:
            self._advance()
            return StringLiteral(token.value)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if token.value in ("true", "false"):
                return BooleanLiteral(token.value == "true")
            expr: Expression
            if self._match(TokenType.LPAREN):
                arguments = self._parse_arguments(TokenType.RPAREN)
                self._expect(TokenType.RPAREN, "Expected ')' after arguments")
                expr = CallExpression(token.value, arguments)
            else:
                expr = IdentifierExpression(token.value)
            while self._match(TokenType.LBRACKET):
                index = self._parse_expression()
                self._expect(TokenType.RBRACKET, "Expected ']' after index")
                expr = ArraySubscript(expr, index)
            return expr

        if token.type == TokenType.LBRACKET:
            self._advance()
            elements = self._parse_arguments(TokenType.RBRACKET)
            self._expect(TokenType.RBRACKET, "Expected ']' after array elements")
            return ArrayLiteral(elements)

        if token.is_operator("-"):
            self._advance()
            return UnaryExpression("-", self._parse_primary())

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        raise QuarkSyntaxError(
            f"Unexpected token in expression: {self._describe(token)}"
        )

    def _parse_arguments(self, closing: TokenType) -> tuple[Expression, ...]:
        """Parse a comma separated expression list up to (not including) closing."""
        if self._check(closing):
            return ()

        items = [self._parse_expression()]
        while self._match(TokenType.COMMA):
            items.append(self._parse_expression())
        return tuple(items)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(tokens: list[Token], precedence: bool = True) -> tuple[Statement, ...]:
    """
    Parse a token list into a program.

    Args:
        tokens: Tokens from the lexer
        precedence: False selects flat right-nested operator chains

    Raises:
        QuarkSyntaxError: On the first grammar violation
    """
    return QuarkParser(tokens, precedence).parse()


def parse_source(source: str, precedence: bool = True) -> tuple[Statement, ...]:
    """
    Parse Quark source code into a program.

    This is a convenience function that combines lexing and parsing.

    Raises:
        LexicalError: If tokenizing fails
        QuarkSyntaxError: If parsing fails
    """
    return parse(tokenize(source), precedence)
