import pytest

from boxtype.box.boxed import install_box_type
from boxtype.boxtype import BoxType
from boxtype.typecheck.service import TypeService


@pytest.fixture
def types() -> TypeService:
    service = TypeService({"string": "str", "number": "float"})
    install_box_type(service)
    return service


@pytest.fixture
def boxtype() -> BoxType:
    return BoxType()
