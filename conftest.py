"""
Shared pytest fixtures. Living at the repository root also puts the root on
sys.path, so tests import the code as backend.app...
"""
import pytest

from backend.app.schemas.layout import Container, Region
from backend.app.utils import geometry_utils as gu


class ScriptedOracle:
    """Oracle double: returns a fixed reply or raises a fixed error."""

    def __init__(self, reply: str = "", error: Exception = None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle


@pytest.fixture
def store():
    return Container(width=30, height=20)


@pytest.fixture
def demo_zones():
    return [
        Region(id="A", label="Grocery", category="grocery", x=0, y=0, w=8, h=6),
        Region(id="B", label="Electronics", category="electronics", x=0, y=0, w=8, h=6),
        Region(id="C", label="Cash Counter", category="checkout", x=0, y=0, w=4, h=3),
    ]


@pytest.fixture
def three_shelves():
    return [
        Region(id="s1", label="Grocery Shelf 1", category="grocery", x=0, y=0, w=1.5, h=0.6),
        Region(id="s2", label="Checkout Shelf 2", category="checkout", x=2.5, y=0, w=1.5, h=0.6),
        Region(id="s3", label="Grocery Shelf 3", category="grocery", x=0, y=1.6, w=1.5, h=0.6),
    ]


@pytest.fixture
def assert_valid_layout():
    """Checker for the pipeline exit guarantees: in bounds and gap respected."""
    def check(regions, container, min_gap=0.0):
        for r in regions:
            assert r.w > 0 and r.h > 0
            assert gu.in_bounds(r, container), f"{r.id} out of bounds: {r}"
        pairs = gu.find_overlapping_pairs(regions, min_gap)
        assert pairs == [], f"conflicting pairs: {[(regions[i].id, regions[j].id) for i, j in pairs]}"
    return check
