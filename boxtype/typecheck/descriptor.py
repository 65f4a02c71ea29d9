from dataclasses import dataclass
from functools import lru_cache
from inspect import isclass
from typing import Any
from typing import List
from typing import Optional
from typing import Tuple

from boxtype.errors import BoxTypeException

_closing_brackets = {"<": ">", "[": "]"}


@dataclass
class DescriptorSyntaxException(BoxTypeException):
    text: str
    position: int
    reason: str

    def message(self) -> str:
        return "Invalid type descriptor '%s' at position %d: %s" % (self.text, self.position, self.reason)


@dataclass(frozen=True)
class TypeExpression:
    """
        A parsed type-expression string such as `TypedValue<int>` or `variant<int, str>`.
        Arguments are kept as expressions so that subtype predicates can resolve them lazily.
    """
    name: str
    args: Tuple["TypeExpression", ...] = ()

    def __str__(self) -> str:
        return format_descriptor(self)


def _is_name_char(c: str) -> bool:
    return c.isalnum() or c in "_."


class _DescriptorParser:
    text: str
    position: int

    def __init__(self, text: str) -> None:
        self.text = text
        self.position = 0

    def _error(self, reason: str) -> DescriptorSyntaxException:
        return DescriptorSyntaxException(self.text, self.position, reason)

    def _peek(self) -> Optional[str]:
        if self.position >= len(self.text):
            return None
        return self.text[self.position]

    def _skip_whitespace(self) -> None:
        while self.position < len(self.text) and self.text[self.position].isspace():
            self.position += 1

    def _name(self) -> str:
        if self._peek() == "*":
            self.position += 1
            return "*"
        start = self.position
        while self.position < len(self.text) and _is_name_char(self.text[self.position]):
            self.position += 1
        if self.position == start:
            raise self._error("expected a type name")
        return self.text[start:self.position]

    def _expression(self) -> TypeExpression:
        self._skip_whitespace()
        name = self._name()
        self._skip_whitespace()

        opening = self._peek()
        if opening not in _closing_brackets:
            return TypeExpression(name)
        self.position += 1

        args: List[TypeExpression] = [self._expression()]
        self._skip_whitespace()
        while self._peek() == ",":
            self.position += 1
            args.append(self._expression())
            self._skip_whitespace()

        closing = _closing_brackets[opening]
        if self._peek() != closing:
            raise self._error("expected '%s'" % closing)
        self.position += 1
        return TypeExpression(name, tuple(args))

    def parse(self) -> TypeExpression:
        expression = self._expression()
        self._skip_whitespace()
        if self.position != len(self.text):
            raise self._error("unexpected trailing characters")
        return expression


@lru_cache(maxsize=1024)
def parse_descriptor(text: str) -> TypeExpression:
    return _DescriptorParser(text).parse()


def format_descriptor(expression: TypeExpression) -> str:
    if len(expression.args) <= 0:
        return expression.name
    return "%s<%s>" % (expression.name, ", ".join([format_descriptor(arg) for arg in expression.args]))


def descriptor_name(descriptor: Any) -> str:
    """
    :param descriptor: A type-expression string, a parsed expression, a class or a typing construct.
    :return: The canonical printable name of the descriptor (e.g., `int`, `TypedValue<int>`, `List[int]`).
    """
    if isinstance(descriptor, str):
        return format_descriptor(parse_descriptor(descriptor))
    if isinstance(descriptor, TypeExpression):
        return format_descriptor(descriptor)
    if isclass(descriptor) and not hasattr(descriptor, "__origin__"):
        return descriptor.__name__
    return str(descriptor).replace("typing.", "")
