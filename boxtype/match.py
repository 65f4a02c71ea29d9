from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Generic
from typing import List
from typing import Tuple
from typing import TypeVar

from boxtype.typecheck.service import TypeService

S = TypeVar("S")
R = TypeVar("R")


@dataclass
class Match(Generic[S, R]):
    """
        An ordered list of (predicate, handler) cases with a default handler.
        Applying it to a subject calls the handler of the first case whose predicate accepts the subject,
        or the default handler when none does.
    """
    cases: List[Tuple[Callable[[S], bool], Callable[[S], R]]]
    default: Callable[[S], R]

    def case(self, predicate: Callable[[S], bool], handler: Callable[[S], R]) -> "Match[S, R]":
        return Match(self.cases + [(predicate, handler)], self.default)

    def __call__(self, subject: S) -> R:
        for predicate, handler in self.cases:
            if predicate(subject):
                return handler(subject)
        return self.default(subject)


def match(
    subject: S,
    cases: List[Tuple[Callable[[S], bool], Callable[[S], R]]],
    default: Callable[[S], R]
) -> R:
    return Match(cases, default)(subject)


def by_type(types: TypeService, descriptor: Any) -> Callable[[Any], bool]:
    return types.is_type_of(descriptor)
