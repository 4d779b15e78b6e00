import pytest

from habitat_layout.models import PlacedModule, SurfaceBounds


@pytest.fixture
def bounds() -> SurfaceBounds:
    return SurfaceBounds(width=800, height=600)


def make_module(module_id: int, type_id: str, x: float = 0, y: float = 0) -> PlacedModule:
    return PlacedModule(id=module_id, type_id=type_id, x=x, y=y)
