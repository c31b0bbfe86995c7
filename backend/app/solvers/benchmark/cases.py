"""
Standard test cases for benchmarking the layout pipeline.
Each case provides container geometry, a starting region set and the policy
it should be solved under.
"""
from typing import List
from dataclasses import dataclass, field

from ...schemas.layout import Container, Region
from ...schemas.policy import SHELF_POLICY, ZONE_POLICY, LayoutPolicy


@dataclass
class BenchmarkCase:
    name: str
    container: Container
    regions: List[Region]
    policy: LayoutPolicy = field(default_factory=lambda: ZONE_POLICY)


def create_demo_store_case() -> BenchmarkCase:
    """The three demo zones, stacked at the origin, in a 30m x 20m store."""
    container = Container(width=30, height=20)
    regions = [
        Region(id="1", label="Grocery", category="grocery", x=0, y=0, w=8, h=6),
        Region(id="2", label="Electronics", category="electronics", x=0, y=0, w=8, h=6),
        Region(id="3", label="Cash Counter", category="checkout", x=0, y=0, w=4, h=3),
    ]
    return BenchmarkCase("demo_store_3zone", container, regions, ZONE_POLICY)


def create_department_store_case() -> BenchmarkCase:
    """Eight departments of mixed size, several overlapping."""
    container = Container(width=40, height=25)
    regions = [
        Region(id="z1", label="Fresh Produce", category="grocery", x=0, y=0, w=10, h=8),
        Region(id="z2", label="Electronics", category="electronics", x=5, y=2, w=8, h=6),
        Region(id="z3", label="Fashion", category="fashion", x=20, y=0, w=9, h=7),
        Region(id="z4", label="Beauty & Health", category="beauty", x=22, y=4, w=5, h=4),
        Region(id="z5", label="Home & Garden", category="home-garden", x=0, y=12, w=10, h=8),
        Region(id="z6", label="Toys", category="toys", x=14, y=14, w=6, h=5),
        Region(id="z7", label="Storage", category="storage", x=35, y=20, w=8, h=6),
        Region(id="z8", label="Checkout", category="checkout", x=30, y=18, w=6, h=3),
    ]
    return BenchmarkCase("department_store_8zone", container, regions, ZONE_POLICY)


def create_shelf_case() -> BenchmarkCase:
    """Six shelves in an 8m x 6m zone with the shelf aisle gap."""
    container = Container(width=8, height=6)
    regions = [
        Region(id=f"shelf-{i + 1}", label=f"Shelf {i + 1}",
               category="grocery" if i % 2 == 0 else "checkout",
               x=0, y=0, w=1.5, h=0.6)
        for i in range(6)
    ]
    return BenchmarkCase("grocery_zone_6shelf", container, regions, SHELF_POLICY)


def create_crowded_shelf_case() -> BenchmarkCase:
    """More shelves than comfortably fit; exercises the final shrink pass."""
    container = Container(width=5, height=4)
    regions = [
        Region(id=f"shelf-{i + 1}", label=f"Shelf {i + 1}", category="general", x=0.5 * i, y=0.3 * i, w=2.0, h=1.0)
        for i in range(8)
    ]
    return BenchmarkCase("crowded_zone_8shelf", container, regions, SHELF_POLICY)


# List of all available benchmark cases
BENCHMARK_CASES = [
    create_demo_store_case(),
    create_department_store_case(),
    create_shelf_case(),
    create_crowded_shelf_case(),
]
