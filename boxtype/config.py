import logging
import os
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from pyhocon import ConfigFactory
from pyhocon import ConfigTree

from boxtype.errors import BoxTypeException

logger = logging.getLogger(__name__)

ROOT = "boxtype"
REFERENCE_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "reference.conf")


@dataclass
class BoxTypeConfigException(BoxTypeException):
    errors: List[str]

    def message(self) -> str:
        return "Found %d errors while reading configuration: [\n  %s]" % (
            len(self.errors),
            ",\n  ".join(self.errors),
        )


@dataclass
class BoxTypeConfig:
    generic_kind: str = "TypedValue"
    aliases: Dict[str, str] = field(default_factory=dict)
    kinds: Dict[str, Optional[str]] = field(default_factory=dict)


def _read_aliases(hocon: Any, errors: List[str]) -> Dict[str, str]:
    if not isinstance(hocon, ConfigTree):
        errors.append("%s.aliases: Expected a config object but received something of type %s." % (ROOT, type(hocon)))
        return {}

    aliases: Dict[str, str] = {}
    for alias, name in hocon.items():
        if not isinstance(name, str):
            errors.append("%s.aliases.%s: Expected a type name but received %s." % (ROOT, alias, str(name)))
        else:
            aliases[alias] = name
    return aliases


def _read_kinds(hocon: Any, errors: List[str]) -> Dict[str, Optional[str]]:
    if not isinstance(hocon, list):
        errors.append("%s.kinds: Expected a list but received something of type %s." % (ROOT, type(hocon)))
        return {}

    kinds: Dict[str, Optional[str]] = {}
    for index, kind in enumerate(hocon):
        if not isinstance(kind, ConfigTree):
            errors.append("%s.kinds[%d]: Expected a config object." % (ROOT, index))
            continue
        name = kind.get("name", None)
        base_type = kind.get("base-type", None)
        if not isinstance(name, str):
            errors.append("%s.kinds[%d].name: Non-optional field was not found." % (ROOT, index))
        elif base_type is not None and not isinstance(base_type, str):
            errors.append("%s.kinds[%d].base-type: Expected a type descriptor string." % (ROOT, index))
        else:
            kinds[name] = base_type
    return kinds


def decode_config(hocon: ConfigTree) -> BoxTypeConfig:
    errors: List[str] = []

    generic_kind = hocon.get("%s.generic-kind" % ROOT, None)
    if not isinstance(generic_kind, str) or len(generic_kind) <= 0:
        errors.append("%s.generic-kind: Expected a non-empty string." % ROOT)

    aliases = _read_aliases(hocon.get("%s.aliases" % ROOT, ConfigTree()), errors)
    kinds = _read_kinds(hocon.get("%s.kinds" % ROOT, []), errors)

    if len(errors) > 0:
        raise BoxTypeConfigException(errors)
    return BoxTypeConfig(generic_kind=generic_kind, aliases=aliases, kinds=kinds)


def load_config(path: Optional[str] = None, overrides: Optional[str] = None) -> BoxTypeConfig:
    """
    :param path: A HOCON file whose settings take precedence over the reference configuration.
    :param overrides: A HOCON string whose settings take precedence over both the file and the reference.
    :return: The decoded configuration.
    """
    hocon = ConfigFactory.parse_file(REFERENCE_CONFIG_PATH)
    if path is not None:
        logger.debug("Reading boxtype configuration from %s", path)
        hocon = ConfigFactory.parse_file(path).with_fallback(hocon)
    if overrides is not None:
        hocon = ConfigFactory.parse_string(overrides).with_fallback(hocon)
    return decode_config(hocon)
