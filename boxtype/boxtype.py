from typing import Any
from typing import Callable
from typing import Optional

from boxtype.box import monad
from boxtype.box.boxed import BoxBuilder
from boxtype.box.boxed import BoxConstructor
from boxtype.box.boxed import BoxedValue
from boxtype.box.registry import BoxRegistry
from boxtype.config import BoxTypeConfig
from boxtype.config import load_config
from boxtype.typecheck.service import TypeService


class BoxType:
    """
        Everything needed to box values, bound to one type service and one registry.

        Instances are independent of each other: kinds and types registered through one are unknown to the others.

        >>> boxtype = BoxType()
        >>> _ = boxtype.register("Container")
        >>> str(boxtype.box_with("Container")("int")(99))
        '[Container int](99)'
    """
    config: BoxTypeConfig
    types: TypeService
    registry: BoxRegistry
    none: BoxedValue = monad.none

    def __init__(self, types: Optional[TypeService] = None, config: Optional[BoxTypeConfig] = None) -> None:
        self.config = config if config is not None else load_config()
        self.types = types if types is not None else TypeService(self.config.aliases)
        monad.install_monad_types(self.types)
        self.registry = BoxRegistry(self.types, self.config.generic_kind, self.config.kinds)

    def register(self, name: str, base_type: Optional[Any] = None) -> BoxConstructor:
        return self.registry.register(name, base_type)

    def get(self, name: str) -> Optional[BoxConstructor]:
        return self.registry.get(name)

    def box_with(self, name: str) -> BoxConstructor:
        return self.registry.box_with(name)

    def type_with(self, descriptor: Any) -> BoxBuilder:
        return self.registry.type_with(descriptor)

    @staticmethod
    def just(value: Any) -> BoxedValue:
        return monad.just(value)

    def maybe(self, descriptor: Any) -> Callable[..., BoxedValue]:
        return monad.maybe(self.types, descriptor)

    def either(self, descriptor: Any, default_value: Any) -> Callable[..., BoxedValue]:
        return monad.either(self.types, descriptor, default_value)

    @staticmethod
    def some(value: Any = None) -> Any:
        return monad.some(value)

    def is_type_of(self, descriptor: Any) -> Callable[[Any], bool]:
        return self.types.is_type_of(descriptor)
