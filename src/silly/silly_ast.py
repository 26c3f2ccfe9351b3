"""
Defines the abstract syntax tree (AST) produced by the SILLY parser.

Classes:
    ASTNode:
        Common base: immutability, single-parent ownership, equality, and
        dictionary serialisation.
    NumberLiteral, VariableRef, BinaryOp, Call:
        Expression nodes.
    Prototype:
        A function name and its parameter names, without a body.
    Function:
        A prototype together with its body expression.
    ASTDict:
        TypedDict shape of `ASTNode.to_dict()` output, suitable for JSON.

Ownership is strictly tree-shaped. A node can be attached to one parent only,
so a subtree can never be shared between two places in a tree and no cycles
can form. Nodes cannot be modified once built.

Example:
    >>> BinaryOp("+", NumberLiteral(1.0), VariableRef("x"))
    BinaryOp('+', NumberLiteral(1.0), VariableRef('x'))
"""

from typing import Any, TypedDict, Union

from silly.silly_constants import ANON_FN_NAME


class ASTDict(TypedDict, total=False):
    """
    Serialised form of an ASTNode.

    Only the fields relevant to a given `kind` are present.
    """

    kind: str
    value: float
    name: str
    op: str
    lhs: "ASTDict"
    rhs: "ASTDict"
    callee: str
    args: list["ASTDict"]
    params: list[str]
    proto: "ASTDict"
    body: "ASTDict"


class ASTNode:
    """
    Base class for every SILLY syntax tree node.

    Subclasses list their fields in `_fields`; `__init__` of a subclass assigns
    them through `_set` and attaches child nodes through `_adopt`. After
    construction any attribute assignment raises `AttributeError`.

    Attributes:
        kind (str): Short node name used in dictionaries ("number", "call", ...).
        parent (ASTNode | None): The node that owns this one, if any.
    """

    kind = "node"
    _fields: tuple[str, ...] = ()

    def __init__(self) -> None:
        object.__setattr__(self, "parent", None)

    def _set(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)

    def _adopt(self, *children: Any) -> tuple["ASTNode", ...]:
        # Nothing is attached unless every child is accepted.
        seen: set[int] = set()
        for child in children:
            if not isinstance(child, ASTNode):
                raise TypeError(f"{type(self).__name__} child must be an ASTNode, got {child!r}")
            if child.parent is not None:
                raise ValueError(f"{child!r} is already owned by {type(child.parent).__name__}")
            if id(child) in seen:
                raise ValueError(f"{child!r} appears twice in one {type(self).__name__}")
            seen.add(id(child))
        for child in children:
            object.__setattr__(child, "parent", self)
        return children

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return False
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        args = ", ".join(repr(getattr(self, f)) for f in self._fields)
        return f"{type(self).__name__}({args})"

    def to_dict(self) -> ASTDict:
        raise NotImplementedError


class NumberLiteral(ASTNode):
    """Numeric literal such as `1.0`."""

    kind = "number"
    _fields = ("value",)

    def __init__(self, value: float) -> None:
        super().__init__()
        self._set("value", float(value))

    def to_dict(self) -> ASTDict:
        return {"kind": self.kind, "value": self.value}


class VariableRef(ASTNode):
    """Reference to a variable, like `a`."""

    kind = "variable"
    _fields = ("name",)

    def __init__(self, name: str) -> None:
        super().__init__()
        self._set("name", name)

    def to_dict(self) -> ASTDict:
        return {"kind": self.kind, "name": self.name}


class BinaryOp(ASTNode):
    """Binary operator application. Both operands are owned by this node."""

    kind = "binary"
    _fields = ("op", "lhs", "rhs")

    def __init__(self, op: str, lhs: "ExprNode", rhs: "ExprNode") -> None:
        super().__init__()
        self._set("op", op)
        lhs, rhs = self._adopt(lhs, rhs)
        self._set("lhs", lhs)
        self._set("rhs", rhs)

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "op": self.op,
            "lhs": self.lhs.to_dict(),
            "rhs": self.rhs.to_dict(),
        }


class Call(ASTNode):
    """Function call. Arguments are kept in source order as a tuple."""

    kind = "call"
    _fields = ("callee", "args")

    def __init__(self, callee: str, args: list["ExprNode"] | None = None) -> None:
        super().__init__()
        self._set("callee", callee)
        self._set("args", self._adopt(*(args or [])))

    def __repr__(self) -> str:
        return f"Call({self.callee!r}, {list(self.args)!r})"

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "callee": self.callee,
            "args": [a.to_dict() for a in self.args],
        }


class Prototype(ASTNode):
    """
    The "prototype" of a function: its name and its parameter names, which
    implicitly fix the number of arguments it takes.

    Parameter names are not checked for uniqueness here.
    """

    kind = "prototype"
    _fields = ("name", "params")

    def __init__(self, name: str, params: list[str] | None = None) -> None:
        super().__init__()
        self._set("name", name)
        self._set("params", tuple(params or []))

    def __repr__(self) -> str:
        return f"Prototype({self.name!r}, {list(self.params)!r})"

    def to_dict(self) -> ASTDict:
        return {"kind": self.kind, "name": self.name, "params": list(self.params)}


class Function(ASTNode):
    """A function definition: an owned prototype plus an owned body expression."""

    kind = "function"
    _fields = ("proto", "body")

    def __init__(self, proto: Prototype, body: "ExprNode") -> None:
        super().__init__()
        if not isinstance(proto, Prototype):
            raise TypeError(f"Function prototype must be a Prototype, got {proto!r}")
        proto, body = self._adopt(proto, body)
        self._set("proto", proto)
        self._set("body", body)

    @property
    def is_anonymous(self) -> bool:
        """True for the wrapper built around a bare top-level expression."""
        return self.proto.name == ANON_FN_NAME

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "proto": self.proto.to_dict(),
            "body": self.body.to_dict(),
        }


ExprNode = Union[NumberLiteral, VariableRef, BinaryOp, Call]
TopLevelNode = Union[Function, Prototype]

__all__ = [
    "ASTDict",
    "ASTNode",
    "BinaryOp",
    "Call",
    "ExprNode",
    "Function",
    "NumberLiteral",
    "Prototype",
    "TopLevelNode",
    "VariableRef",
]
