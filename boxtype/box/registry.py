import logging
from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from boxtype.box.boxed import BOX_TYPE
from boxtype.box.boxed import BoxBuilder
from boxtype.box.boxed import BoxConstructor
from boxtype.box.boxed import BoxedValue
from boxtype.box.boxed import install_box_type
from boxtype.errors import BoxTypeException
from boxtype.typecheck.service import TypeService

logger = logging.getLogger(__name__)

GENERIC_KIND = "TypedValue"


@dataclass
class UnknownBoxKindException(BoxTypeException):
    name: str

    def message(self) -> str:
        return "No box type \"%s\" exists" % self.name


class BoxRegistry:
    """
        Maps box kind names to their constructors.

        Registering a kind also registers a type of the same name with the type service, so that
        `Name` accepts any box of that kind and `Name<X>` accepts boxes of that kind whose fully
        unwrapped content satisfies `X`.

        The generic kind (`TypedValue` unless configured otherwise) is always registered.
    """
    types: TypeService
    generic_kind: str
    _constructors: Dict[str, BoxConstructor]

    def __init__(
        self,
        types: TypeService,
        generic_kind: str = GENERIC_KIND,
        kinds: Optional[Dict[str, Optional[str]]] = None
    ) -> None:
        self.types = types
        self.generic_kind = generic_kind
        self._constructors = {}

        install_box_type(types)
        self.register(generic_kind)
        for name, base_type in (kinds or {}).items():
            self.register(name, base_type)

    def _kind_predicate(self, name: str) -> Callable[[Any, List[str]], bool]:
        def is_of_kind(value: BoxedValue, args: List[str]) -> bool:
            if value.box_kind != name:
                return False
            if len(args) <= 0:
                return True
            return self.types.satisfies(args[0], value())

        return is_of_kind

    def register(self, name: str, base_type: Optional[Any] = None) -> BoxConstructor:
        if base_type is not None:
            # Fail early on a base type the type service cannot check
            self.types.checker(base_type)

        if name in self._constructors:
            logger.warning("Box kind %s is already registered; replacing it", name)
        else:
            logger.debug("Registering box kind %s", name)

        constructor = BoxConstructor(name, self.types, base_type)
        self._constructors[name] = constructor
        self.types.subtype(BOX_TYPE)(name, self._kind_predicate(name))
        return constructor

    def get(self, name: str) -> Optional[BoxConstructor]:
        return self._constructors.get(name)

    def names(self) -> List[str]:
        return list(self._constructors.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._constructors

    def box_with(self, name: str) -> BoxConstructor:
        constructor = self.get(name)
        if constructor is None:
            raise UnknownBoxKindException(name)
        return constructor

    def type_with(self, descriptor: Any) -> BoxBuilder:
        return self.box_with(self.generic_kind)(descriptor)
