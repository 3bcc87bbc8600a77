"""
Defines the abstract syntax tree (AST) node classes for the SOIT language.

Every construct the parser recognizes has its own node class. All of them derive
from `ASTNode`, which provides structural equality, a compact `repr`, tree
walking, and serialization to plain dictionaries.

Classes:
    ASTNode:
        Base of every node. Tracks `kind`, `line` and `column`, the source position
        of the token that opened the construct.

    Statement / Expression:
        Marker bases splitting the closed set of node kinds in two.

    CatchClause / ObjectPair:
        Sub-records of `TryStatement` and `ObjectLiteral`.

Functions:
    make_node(cls, token, **fields):
        The single constructor the parser uses; it stamps the anchoring token's
        position onto the new node.

Serialization:
    `to_dict()` emits the external field names (`type`, `superClassName`,
    `isAbstract`, `className`, ...) so the result can go straight to `json.dumps`.

Example:
    node = make_node(Identifier, tok, name="x")
    node.to_dict()  # {"type": "Identifier", "name": "x", "line": 1, "column": 5}
"""

from collections.abc import Iterator
from typing import Any, TypedDict, TypeVar, Union

from soit.soit_tokens import Token


class ASTDict(TypedDict, total=False):
    """
    Serialized shape shared by every node.

    Fields:
        type (str): The node kind (e.g. "IfStatement", "Literal").
        line (int): Line of the token that opened the construct.
        column (int): Column of the token that opened the construct.

    Kind-specific fields (`name`, `body`, `superClassName`, ...) sit alongside these.
    """

    type: str
    line: int
    column: int


def _external_name(field: str) -> str:
    head, *rest = field.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _serialize(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


class ASTNode:
    """
    Base class for every SOIT syntax tree node.

    Subclasses declare their payload in `fields`; equality, `repr`, `children()`
    and `to_dict()` are all driven by that tuple.

    Attributes:
        kind (str): Node kind discriminator, identical to the class name.
        fields (tuple[str, ...]): Names of the kind-specific attributes.
        line (int): Source line of the opening token.
        column (int): Source column of the opening token.
    """

    kind: str = "ASTNode"
    fields: tuple[str, ...] = ()

    def __init__(self, line: int = 0, column: int = 0) -> None:
        self.line = line
        self.column = column

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.kind = cls.__name__

    def field_values(self) -> list[tuple[str, Any]]:
        return [(name, getattr(self, name)) for name in self.fields]

    def children(self) -> Iterator["ASTNode"]:
        """Yield direct child nodes in source order."""
        for _, value in self.field_values():
            if isinstance(value, ASTNode):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, ASTNode):
                        yield item

    def walk(self) -> Iterator["ASTNode"]:
        """Yield this node and every descendant, depth-first, pre-order."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __repr__(self) -> str:
        parts = [f"{name}={value!r}" for name, value in self.field_values()]
        return f"{self.kind}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode) or self.kind != other.kind:
            return False
        return (
            self.field_values() == other.field_values()
            and self.line == other.line
            and self.column == other.column
        )

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"type": self.kind}
        for name, value in self.field_values():
            data[_external_name(name)] = _serialize(value)
        data["line"] = self.line
        data["column"] = self.column
        return data  # type: ignore[return-value]


class Statement(ASTNode):
    pass


class Expression(ASTNode):
    pass


# Statements


class Program(ASTNode):
    """Sole root of a parsed tree; never nested."""

    fields = ("body",)

    def __init__(
        self, body: list[Statement] | None = None, line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.body: list[Statement] = body or []


class VariableDeclaration(Statement):
    fields = ("name", "value")

    def __init__(
        self, name: str, value: Expression, line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.name = name
        self.value = value


class PrintStatement(Statement):
    fields = ("args",)

    def __init__(
        self, args: list[Expression], line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.args = args


class IfStatement(Statement):
    """`alternate` is None when there is no `sinon` branch."""

    fields = ("condition", "consequent", "alternate")

    def __init__(
        self,
        condition: Expression,
        consequent: list[Statement],
        alternate: list[Statement] | None = None,
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.condition = condition
        self.consequent = consequent
        self.alternate = alternate


class WhileStatement(Statement):
    fields = ("condition", "body")

    def __init__(
        self,
        condition: Expression,
        body: list[Statement],
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.condition = condition
        self.body = body


class FunctionDeclaration(Statement):
    """
    A named function. `visibility` is "public" or "prive" for class members and
    None everywhere else; interface signatures carry an empty body.
    """

    fields = ("name", "params", "body", "visibility")

    def __init__(
        self,
        name: str,
        params: list[str],
        body: list[Statement],
        visibility: str | None = None,
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.name = name
        self.params = params
        self.body = body
        self.visibility = visibility


class ReturnStatement(Statement):
    fields = ("argument",)

    def __init__(self, argument: Expression, line: int = 0, column: int = 0) -> None:
        super().__init__(line, column)
        self.argument = argument


class ClassDeclaration(Statement):
    """The superclass is recorded by name only; nothing is resolved here."""

    fields = ("name", "super_class_name", "methods", "is_abstract")

    def __init__(
        self,
        name: str,
        super_class_name: str | None,
        methods: list[FunctionDeclaration],
        is_abstract: bool = False,
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.name = name
        self.super_class_name = super_class_name
        self.methods = methods
        self.is_abstract = is_abstract


class InterfaceDeclaration(Statement):
    fields = ("name", "methods")

    def __init__(
        self,
        name: str,
        methods: list[FunctionDeclaration],
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.name = name
        self.methods = methods


class CatchClause(ASTNode):
    fields = ("param", "body")

    def __init__(
        self, param: str, body: list[Statement], line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.param = param
        self.body = body


class TryStatement(Statement):
    fields = ("block", "handler", "finalizer")

    def __init__(
        self,
        block: list[Statement],
        handler: CatchClause | None = None,
        finalizer: list[Statement] | None = None,
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.block = block
        self.handler = handler
        self.finalizer = finalizer


class ThrowStatement(Statement):
    fields = ("argument",)

    def __init__(self, argument: Expression, line: int = 0, column: int = 0) -> None:
        super().__init__(line, column)
        self.argument = argument


class IncludeStatement(Statement):
    fields = ("path",)

    def __init__(self, path: str, line: int = 0, column: int = 0) -> None:
        super().__init__(line, column)
        self.path = path


class PourChaqueStatement(Statement):
    fields = ("variable", "iterable", "body")

    def __init__(
        self,
        variable: str,
        iterable: Expression,
        body: list[Statement],
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.variable = variable
        self.iterable = iterable
        self.body = body


class ExpressionStatement(Statement):
    fields = ("expression",)

    def __init__(
        self, expression: Expression, line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.expression = expression


# Expressions


class AssignmentExpression(Expression):
    """Any left-hand shape is accepted; assignability is checked downstream."""

    fields = ("left", "right")

    def __init__(
        self, left: Expression, right: Expression, line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.left = left
        self.right = right


class BinaryExpression(Expression):
    fields = ("operator", "left", "right")

    def __init__(
        self,
        operator: str,
        left: Expression,
        right: Expression,
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.operator = operator
        self.left = left
        self.right = right


class UnaryExpression(Expression):
    fields = ("operator", "argument")

    def __init__(
        self, operator: str, argument: Expression, line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.operator = operator
        self.argument = argument


class Literal(Expression):
    fields = ("value",)

    def __init__(
        self,
        value: Union[int, float, str, bool, None],
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.value = value


class Identifier(Expression):
    fields = ("name",)

    def __init__(self, name: str, line: int = 0, column: int = 0) -> None:
        super().__init__(line, column)
        self.name = name


class MemberExpression(Expression):
    """Indexed access `object[property]`; there is no dotted form."""

    fields = ("object", "property")

    def __init__(
        self,
        object: Expression,
        property: Expression,
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(line, column)
        self.object = object
        self.property = property


class CallExpression(Expression):
    """`callee` is the bare function name, not an arbitrary expression."""

    fields = ("callee", "args")

    def __init__(
        self, callee: str, args: list[Expression], line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.callee = callee
        self.args = args


class NewExpression(Expression):
    fields = ("class_name",)

    def __init__(self, class_name: str, line: int = 0, column: int = 0) -> None:
        super().__init__(line, column)
        self.class_name = class_name


class ListLiteral(Expression):
    fields = ("elements",)

    def __init__(
        self, elements: list[Expression], line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.elements = elements


class ObjectPair(ASTNode):
    fields = ("key", "value")

    def __init__(
        self, key: str, value: Expression, line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.key = key
        self.value = value


class ObjectLiteral(Expression):
    fields = ("pairs",)

    def __init__(
        self, pairs: list[ObjectPair], line: int = 0, column: int = 0
    ) -> None:
        super().__init__(line, column)
        self.pairs = pairs


NodeT = TypeVar("NodeT", bound=ASTNode)


def make_node(cls: type[NodeT], token: Token, **fields: Any) -> NodeT:
    """Build a node of kind `cls` positioned at `token`."""
    return cls(**fields, line=token.line, column=token.column)
