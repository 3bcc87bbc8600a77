"""
SOIT Language Parser

Turns the flat token list produced by an external SOIT lexer into a `Program`
syntax tree, in a single recursive-descent pass.

Supported Constructs
--------------------
- Statements:
    * Declarations: `soit x = ...`, `fonction f(a, b) { ... }`
    * Output: `montre a, b` or `montre(a, b)`
    * Control flow: `si` / `sinon`, `tantque`, `pour chaque x dans ... { ... }`
    * Classes: `[abstrait] classe A [herite de B] { [prive|public] fonction ... }`
    * Interfaces: `interface I { fonction f(a) ... }`
    * Exceptions: `essaye { } [attrape (e) { }] [enfin { }]`, `lance expr`
    * Modules: `inclure "chemin"`
    * Anything else is an expression statement.

- Expressions, lowest to highest binding:
    * assignment `=` (right-associative)
    * `ou`, `et`
    * `==` `!=`, then `<` `>` `<=` `>=`
    * `+` `-`, then `*` `/` `.`
    * prefix `non`, `typeof`, `-`
    * primaries: `( ... )`, numbers, strings, `vrai`/`faux`/`nul`,
      `nouveau A()`, identifiers, calls `f(...)`, indexing `a[i]`,
      lists `[ ... ]` and objects `{ cle: valeur }`

Parser Behavior
---------------
- One token of lookahead, no backtracking.
- Fails fast: the first grammar violation raises `SyntaxError`, whose message
  starts with `[Ligne N]`. No partial tree is returned.

Entry Points
------------
- `Parser.parse()`: parse a full program.
- `Parser.parse_statement()`: parse one statement.
- `Parser.parse_expression()`: parse one expression.
- `parse_tokens(tokens)`: shorthand for `Parser(tokens).parse()`.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from soit.soit_ast import (
    AssignmentExpression,
    BinaryExpression,
    CallExpression,
    ClassDeclaration,
    CatchClause,
    Expression,
    ExpressionStatement,
    FunctionDeclaration,
    Identifier,
    IfStatement,
    IncludeStatement,
    InterfaceDeclaration,
    ListLiteral,
    Literal,
    MemberExpression,
    NewExpression,
    ObjectLiteral,
    ObjectPair,
    PourChaqueStatement,
    PrintStatement,
    Program,
    ReturnStatement,
    Statement,
    ThrowStatement,
    TryStatement,
    UnaryExpression,
    VariableDeclaration,
    WhileStatement,
    make_node,
)
from soit.soit_tokens import (
    IDENTIFIER,
    KEYWORD,
    LITERAL_KEYWORDS,
    LITERAL_TYPES,
    STRING,
    VISIBILITY_KEYWORDS,
    Token,
)

# Interpreter recursion limit while a parse runs. One level of nested
# expression costs about sixteen frames.
RECURSION_LIMIT = 10_000


@contextmanager
def recursion_headroom(limit: int = RECURSION_LIMIT) -> Iterator[None]:
    """Raise the interpreter recursion limit to at least `limit` for the block."""
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous, limit))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Parser:
    """
    SOIT Parser Class

    Owns a cursor over one token list. A parser instance is single use and not
    shared between threads; independent parses need independent instances.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream, consumed strictly left to right.
    position : int
        Current index into the token stream.
    statement_rules : dict[str, Callable[[], Statement]]
        Statement-introducing keyword -> grammar rule.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0

        self.statement_rules: dict[str, Callable[[], Statement]] = {
            "soit": self.parse_variable_declaration,
            "montre": self.parse_print_statement,
            "si": self.parse_if_statement,
            "tantque": self.parse_while_statement,
            "fonction": self.parse_function_declaration,
            "renvoie": self.parse_return_statement,
            "classe": self.parse_class_declaration,
            "abstrait": self.parse_abstract_class_declaration,
            "interface": self.parse_interface_declaration,
            "essaye": self.parse_try_statement,
            "lance": self.parse_throw_statement,
            "inclure": self.parse_include_statement,
            "pour": self.parse_pour_chaque_statement,
        }

        self.equality_ops: tuple[str, ...] = ("==", "!=")
        self.relational_ops: tuple[str, ...] = ("<", ">", "<=", ">=")
        self.additive_ops: tuple[str, ...] = ("+", "-")
        # "." sits with the multiplicative operators; it is not member access.
        self.multiplicative_ops: tuple[str, ...] = ("*", "/", ".")
        self.unary_ops: tuple[str, ...] = ("non", "typeof", "-")

    # Cursor

    def peek(self) -> Token | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def eat(self) -> Token:
        tok = self.peek()
        if tok is None:
            raise self.error("fin de fichier inattendue")
        self.position += 1
        return tok

    def at(self, *values: str) -> bool:
        tok = self.peek()
        return tok is not None and tok.matches(*values)

    def current_line(self) -> int:
        tok = self.peek()
        if tok is not None:
            return tok.line
        return self.tokens[-1].line if self.tokens else 0

    def found(self) -> str:
        tok = self.peek()
        return "fin de fichier atteinte" if tok is None else f"trouvé '{tok.value}'"

    def error(self, message: str, line: int | None = None) -> SyntaxError:
        if line is None:
            line = self.current_line()
        return SyntaxError(f"[Ligne {line}] {message}")

    def expect(self, value: str, message: str) -> Token:
        if not self.at(value):
            raise self.error(f"{message}, {self.found()}")
        return self.eat()

    def expect_type(self, type_: str, message: str) -> Token:
        tok = self.peek()
        if tok is None or tok.type != type_:
            raise self.error(f"{message}, {self.found()}")
        return self.eat()

    # Program and statements

    def parse(self) -> Program:
        """
        Parse every remaining token into a `Program`.

        Nesting too deep for the interpreter stack is reported as a
        `SyntaxError` on the line where parsing stopped.
        """
        first = self.peek()
        body: list[Statement] = []
        with recursion_headroom():
            try:
                while self.peek() is not None:
                    body.append(self.parse_statement())
            except RecursionError:
                raise self.error("imbrication trop profonde") from None
        if first is None:
            return Program(body)
        return make_node(Program, first, body=body)

    def parse_statement(self) -> Statement:
        tok = self.peek()
        if tok is None:
            raise self.error("instruction attendue, fin de fichier atteinte")

        if tok.type == KEYWORD:
            rule = self.statement_rules.get(tok.value)
            if rule is not None:
                return rule()

        expr = self.parse_expression()
        return make_node(ExpressionStatement, tok, expression=expr)

    def parse_block(self, opener: Token, label: str) -> list[Statement]:
        """
        Parse `{ statement* }`.

        A block left open at end of input is reported on the line of `opener`,
        the keyword that started the construct.
        """
        self.expect("{", f"'{{' attendu pour {label}")
        body: list[Statement] = []
        while self.peek() is not None and not self.at("}"):
            body.append(self.parse_statement())
        if self.peek() is None:
            raise self.error(f"'}}' attendu pour fermer {label}", line=opener.line)
        self.eat()
        return body

    def parse_body(self, opener: Token, label: str) -> list[Statement]:
        """Braced block, or a single unbraced statement."""
        if self.at("{"):
            return self.parse_block(opener, label)
        return [self.parse_statement()]

    def parse_variable_declaration(self) -> VariableDeclaration:
        start = self.eat()  # 'soit'
        name_tok = self.expect_type(IDENTIFIER, "Nom de variable attendu")
        self.expect("=", "'=' attendu")
        value = self.parse_expression()
        return make_node(VariableDeclaration, start, name=name_tok.value, value=value)

    def parse_print_statement(self) -> PrintStatement:
        start = self.eat()  # 'montre'
        parenthesized = self.at("(")
        if parenthesized:
            self.eat()

        args = [self.parse_expression()]
        while self.at(","):
            self.eat()
            args.append(self.parse_expression())

        if parenthesized:
            self.expect(")", "')' attendu après les arguments de montre")
        return make_node(PrintStatement, start, args=args)

    def parse_if_statement(self) -> IfStatement:
        start = self.eat()  # 'si'
        condition = self.parse_expression()
        consequent = self.parse_body(start, "le bloc si")

        alternate: list[Statement] | None = None
        if self.at("sinon"):
            else_tok = self.eat()
            alternate = self.parse_body(else_tok, "le bloc sinon")

        return make_node(
            IfStatement,
            start,
            condition=condition,
            consequent=consequent,
            alternate=alternate,
        )

    def parse_while_statement(self) -> WhileStatement:
        start = self.eat()  # 'tantque'
        condition = self.parse_expression()
        body = self.parse_body(start, "le bloc tantque")
        return make_node(WhileStatement, start, condition=condition, body=body)

    def parse_function_declaration(
        self, visibility: str | None = None, signature_only: bool = False
    ) -> FunctionDeclaration:
        """
        Parse `fonction name(a, b) { ... }`.

        With `signature_only`, the body may be left out entirely (interface
        members); the declaration then has an empty body.
        """
        start = self.eat()  # 'fonction'
        name_tok = self.expect_type(IDENTIFIER, "Nom de fonction attendu")
        self.expect("(", "'(' attendu après le nom de la fonction")

        params: list[str] = []
        if not self.at(")"):
            params.append(self.expect_type(IDENTIFIER, "Nom de paramètre attendu").value)
            while self.at(","):
                self.eat()
                params.append(
                    self.expect_type(IDENTIFIER, "Nom de paramètre attendu").value
                )
        self.expect(")", "')' attendu après les paramètres")

        if signature_only and not self.at("{"):
            body: list[Statement] = []
        else:
            body = self.parse_block(start, "le corps de la fonction")

        return make_node(
            FunctionDeclaration,
            start,
            name=name_tok.value,
            params=params,
            body=body,
            visibility=visibility,
        )

    def parse_return_statement(self) -> ReturnStatement:
        start = self.eat()  # 'renvoie'
        return make_node(ReturnStatement, start, argument=self.parse_expression())

    def parse_abstract_class_declaration(self) -> ClassDeclaration:
        start = self.eat()  # 'abstrait'
        if not self.at("classe"):
            raise self.error(f"'classe' attendu après 'abstrait', {self.found()}")
        return self.parse_class_declaration(is_abstract=True, anchor=start)

    def parse_class_declaration(
        self, is_abstract: bool = False, anchor: Token | None = None
    ) -> ClassDeclaration:
        """Parse a class; `anchor` is the `abstrait` token when there is one."""
        start = self.eat()  # 'classe'
        name_tok = self.expect_type(IDENTIFIER, "Nom de classe attendu")

        super_class_name: str | None = None
        if self.at("herite"):
            self.eat()
            self.expect("de", "'de' attendu après 'herite'")
            super_class_name = self.expect_type(
                IDENTIFIER, "Nom de la classe parente attendu"
            ).value

        self.expect("{", "'{' attendu pour la classe")
        methods: list[FunctionDeclaration] = []
        while self.peek() is not None and not self.at("}"):
            visibility = "public"
            if self.at(*VISIBILITY_KEYWORDS):
                visibility = self.eat().value
            if not self.at("fonction"):
                raise self.error(
                    "Seules les fonctions sont autorisées dans les classes, "
                    + self.found()
                )
            methods.append(self.parse_function_declaration(visibility=visibility))
        if self.peek() is None:
            raise self.error("'}' attendu pour fermer la classe", line=start.line)
        self.eat()

        return make_node(
            ClassDeclaration,
            anchor or start,
            name=name_tok.value,
            super_class_name=super_class_name,
            methods=methods,
            is_abstract=is_abstract,
        )

    def parse_interface_declaration(self) -> InterfaceDeclaration:
        start = self.eat()  # 'interface'
        name_tok = self.expect_type(IDENTIFIER, "Nom d'interface attendu")

        self.expect("{", "'{' attendu pour l'interface")
        methods: list[FunctionDeclaration] = []
        while self.peek() is not None and not self.at("}"):
            if not self.at("fonction"):
                raise self.error(
                    "Seules les déclarations de fonctions sont autorisées dans une "
                    "interface, " + self.found()
                )
            methods.append(self.parse_function_declaration(signature_only=True))
        if self.peek() is None:
            raise self.error("'}' attendu pour fermer l'interface", line=start.line)
        self.eat()

        return make_node(
            InterfaceDeclaration, start, name=name_tok.value, methods=methods
        )

    def parse_try_statement(self) -> TryStatement:
        start = self.eat()  # 'essaye'
        block = self.parse_block(start, "le bloc essaye")

        handler: CatchClause | None = None
        if self.at("attrape"):
            catch_tok = self.eat()
            self.expect("(", "'(' attendu après 'attrape'")
            param_tok = self.expect_type(IDENTIFIER, "Nom de l'erreur attendu")
            self.expect(")", "')' attendu après le nom de l'erreur")
            body = self.parse_block(catch_tok, "le bloc attrape")
            handler = make_node(CatchClause, catch_tok, param=param_tok.value, body=body)

        finalizer: list[Statement] | None = None
        if self.at("enfin"):
            finally_tok = self.eat()
            finalizer = self.parse_block(finally_tok, "le bloc enfin")

        return make_node(
            TryStatement, start, block=block, handler=handler, finalizer=finalizer
        )

    def parse_throw_statement(self) -> ThrowStatement:
        start = self.eat()  # 'lance'
        return make_node(ThrowStatement, start, argument=self.parse_expression())

    def parse_include_statement(self) -> IncludeStatement:
        start = self.eat()  # 'inclure'
        path_tok = self.expect_type(
            STRING, "Chemin de fichier attendu (chaîne de caractères) après inclure"
        )
        return make_node(IncludeStatement, start, path=path_tok.value)

    def parse_pour_chaque_statement(self) -> PourChaqueStatement:
        start = self.eat()  # 'pour'
        self.expect("chaque", "'chaque' attendu après 'pour'")
        var_tok = self.expect_type(
            IDENTIFIER, "Nom de variable attendu dans la boucle pour chaque"
        )
        self.expect("dans", "'dans' attendu")
        iterable = self.parse_expression()
        body = self.parse_block(start, "la boucle pour chaque")
        return make_node(
            PourChaqueStatement,
            start,
            variable=var_tok.value,
            iterable=iterable,
            body=body,
        )

    # Expressions

    def parse_expression(self) -> Expression:
        return self.parse_assignment()

    def parse_assignment(self) -> Expression:
        left = self.parse_or()
        if self.at("="):
            op_tok = self.eat()
            right = self.parse_assignment()
            return make_node(AssignmentExpression, op_tok, left=left, right=right)
        return left

    def parse_binary(
        self, operators: tuple[str, ...], operand: Callable[[], Expression]
    ) -> Expression:
        """Left-associative chain of `operand (op operand)*`."""
        left = operand()
        while self.at(*operators):
            op_tok = self.eat()
            right = operand()
            left = make_node(
                BinaryExpression, op_tok, operator=op_tok.value, left=left, right=right
            )
        return left

    def parse_or(self) -> Expression:
        return self.parse_binary(("ou",), self.parse_and)

    def parse_and(self) -> Expression:
        return self.parse_binary(("et",), self.parse_equality)

    def parse_equality(self) -> Expression:
        return self.parse_binary(self.equality_ops, self.parse_relational)

    def parse_relational(self) -> Expression:
        return self.parse_binary(self.relational_ops, self.parse_additive)

    def parse_additive(self) -> Expression:
        return self.parse_binary(self.additive_ops, self.parse_multiplicative)

    def parse_multiplicative(self) -> Expression:
        return self.parse_binary(self.multiplicative_ops, self.parse_unary)

    def parse_unary(self) -> Expression:
        if self.at(*self.unary_ops):
            op_tok = self.eat()
            argument = self.parse_unary()
            return make_node(
                UnaryExpression, op_tok, operator=op_tok.value, argument=argument
            )
        return self.parse_primary()

    def parse_primary(self) -> Expression:
        tok = self.peek()
        if tok is None:
            raise self.error("Expression attendue, fin de fichier atteinte")

        if tok.matches("("):
            self.eat()
            expr = self.parse_expression()
            self.expect(")", "')' attendu")
            return expr

        if tok.type in LITERAL_TYPES:
            self.eat()
            return make_node(Literal, tok, value=tok.value)

        if tok.type == KEYWORD:
            if tok.value in LITERAL_KEYWORDS:
                self.eat()
                return make_node(Literal, tok, value=LITERAL_KEYWORDS[tok.value])
            if tok.value == "nouveau":
                return self.parse_new_expression()

        if tok.type == IDENTIFIER:
            return self.parse_identifier_expression()

        if tok.matches("["):
            return self.parse_list_literal()

        if tok.matches("{"):
            return self.parse_object_literal()

        raise self.error(f"Expression inattendue: {tok.value}", line=tok.line)

    def parse_new_expression(self) -> NewExpression:
        start = self.eat()  # 'nouveau'
        class_tok = self.expect_type(IDENTIFIER, "Nom de classe attendu après 'nouveau'")
        self.expect("(", "'(' attendu après le nom de la classe")
        self.expect(")", "')' attendu, 'nouveau' ne prend pas d'arguments")
        return make_node(NewExpression, start, class_name=class_tok.value)

    def parse_identifier_expression(self) -> Expression:
        """Identifier, call `f(...)`, or indexed access `a[i]`, `a[i][j]`."""
        ident_tok = self.eat()

        if self.at("("):
            self.eat()
            args = self.parse_expression_list(")", "')' attendu après les arguments")
            return make_node(CallExpression, ident_tok, callee=ident_tok.value, args=args)

        node: Expression = make_node(Identifier, ident_tok, name=ident_tok.value)
        while self.at("["):
            self.eat()
            index = self.parse_expression()
            self.expect("]", "']' attendu après l'index")
            node = make_node(MemberExpression, ident_tok, object=node, property=index)
        return node

    def parse_expression_list(self, closer: str, message: str) -> list[Expression]:
        """Comma-separated expressions up to and including `closer`."""
        items: list[Expression] = []
        if not self.at(closer):
            items.append(self.parse_expression())
            while self.at(","):
                self.eat()
                items.append(self.parse_expression())
        self.expect(closer, message)
        return items

    def parse_list_literal(self) -> ListLiteral:
        start = self.eat()  # '['
        elements = self.parse_expression_list("]", "']' attendu à la fin de la liste")
        return make_node(ListLiteral, start, elements=elements)

    def parse_object_literal(self) -> ObjectLiteral:
        start = self.eat()  # '{'
        pairs: list[ObjectPair] = []
        if not self.at("}"):
            pairs.append(self.parse_object_pair())
            while self.at(","):
                self.eat()
                pairs.append(self.parse_object_pair())
        self.expect("}", "'}' attendu à la fin de l'objet")
        return make_node(ObjectLiteral, start, pairs=pairs)

    def parse_object_pair(self) -> ObjectPair:
        key_tok = self.peek()
        if key_tok is None or key_tok.type not in (IDENTIFIER, STRING):
            raise self.error(f"Clé d'objet attendue, {self.found()}")
        self.eat()
        self.expect(":", "':' attendu après la clé")
        value = self.parse_expression()
        return make_node(ObjectPair, key_tok, key=key_tok.value, value=value)


def parse_tokens(tokens: list[Token]) -> Program:
    """Parse a complete token list with a fresh `Parser`."""
    return Parser(tokens).parse()
