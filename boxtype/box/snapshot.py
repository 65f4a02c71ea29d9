import copy
import io
import logging
from collections.abc import MutableMapping
from collections.abc import MutableSequence
from collections.abc import MutableSet
from enum import Enum
from inspect import isclass
from inspect import ismodule
from typing import Any
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_frozen_dataclass(value: Any) -> bool:
    params = getattr(type(value), "__dataclass_params__", None)
    return params is not None and params.frozen


def needs_copy(value: Any) -> bool:
    """
    :param value: Any value that is about to be boxed or handed out of a box.
    :return: True if `value` is a structured value (a mutable container or an object with instance state)
       that must be copied so that the box and its callers never share it.
       Resource handles such as open files are never structured: they are shared as they are.
    """
    if value is None or isclass(value) or ismodule(value) or callable(value) or isinstance(value, Enum):
        return False
    if isinstance(value, (MutableMapping, MutableSequence, MutableSet, bytearray)):
        return True
    if isinstance(value, io.IOBase) or _is_frozen_dataclass(value):
        return False
    return hasattr(value, "__dict__")


def copy_for(value: T) -> T:
    """
    Returns a one-level copy of structured values and `value` itself for everything else.
    Objects whose type refuses to be copied are shared as well.
    """
    if not needs_copy(value):
        return value
    try:
        return copy.copy(value)
    except (TypeError, copy.Error) as e:
        logger.debug("Sharing uncopyable %s instead of copying it: %s", type(value).__name__, e)
        return value
