"""
Layout policies: the knobs that make one generic pipeline serve both
granularities (store -> zones and zone -> shelves).
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
import math

from .layout import Container, Granularity, Region

# Retail categories understood by the prompts and the strategies
KNOWN_CATEGORIES = [
    "grocery", "electronics", "fashion", "beauty", "home-garden",
    "books-media", "toys", "sports", "checkout", "pharmacy",
    "automotive", "storage", "general",
]

# Substrings that identify a category from a free-text label ("Fresh Produce" -> grocery)
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "grocery": ["grocery", "food", "produce"],
    "electronics": ["electronic", "tech", "digital"],
    "fashion": ["fashion", "clothing", "apparel"],
    "beauty": ["beauty", "cosmetic", "health"],
    "home-garden": ["home", "garden", "furniture"],
    "books-media": ["book", "media", "entertainment"],
    "toys": ["toy", "game", "children"],
    "sports": ["sport", "fitness", "outdoor"],
    "checkout": ["checkout", "cash", "register", "counter", "till"],
    "pharmacy": ["pharmacy", "medicine", "drug"],
    "automotive": ["automotive", "vehicle"],
    "storage": ["storage", "warehouse", "stock"],
}

# Shelf categories that belong in a zone of a given category
ZONE_SHELF_CATEGORIES: Dict[str, List[str]] = {
    "grocery": ["grocery", "checkout"],
    "electronics": ["electronics", "checkout"],
    "fashion": ["fashion", "checkout"],
    "beauty": ["beauty", "pharmacy", "checkout"],
    "home-garden": ["home-garden", "checkout"],
    "books-media": ["books-media", "checkout"],
    "toys": ["toys", "checkout"],
    "sports": ["sports", "checkout"],
    "checkout": ["checkout"],
    "pharmacy": ["pharmacy", "beauty", "checkout"],
    "general": ["grocery", "electronics", "fashion", "beauty", "home-garden", "checkout"],
}

# Expansion weights, higher = claims more of the free floor
ZONE_PRIORITIES: Dict[str, float] = {
    "electronics": 1.4,
    "fashion": 1.25,
    "beauty": 1.2,
    "grocery": 1.1,
    "home-garden": 1.0,
    "toys": 1.0,
    "sports": 1.0,
    "pharmacy": 1.0,
    "books-media": 0.95,
    "automotive": 0.9,
    "checkout": 0.9,
    "storage": 0.8,
}

SHELF_PRIORITIES: Dict[str, float] = {
    **ZONE_PRIORITIES,
    "grocery": 1.2,     # high-frequency items
    "checkout": 1.1,    # impulse buys
}

EXIT_PATTERN = r"checkout|cash|counter|register|till"
HIGH_DRAW_PATTERN = r"electronic|featured|promo|new arrival"


def infer_category(label: str) -> str:
    """Map a free-text label to a known category, 'general' when nothing matches."""
    name = (label or "").lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(k in name for k in keywords):
            return category
    return "general"


def seed_store_zones(container: Container, context_name: Optional[str] = None) -> List[Region]:
    """Demo zones used when a store has none yet."""
    return [
        Region(id="1", label="Grocery", category="grocery", x=0, y=0, w=8, h=6),
        Region(id="2", label="Electronics", category="electronics", x=0, y=0, w=8, h=6),
        Region(id="3", label="Cash Counter", category="checkout", x=0, y=0, w=4, h=3),
    ]


def seed_zone_shelves(container: Container, context_name: Optional[str] = None) -> List[Region]:
    """Starter shelves for an empty zone, two per row with 1m aisles.

    Shelf categories follow the zone's own category, inferred from its name.
    """
    zone_category = infer_category(context_name or "")
    categories = ZONE_SHELF_CATEGORIES.get(zone_category, ["general", "checkout"])

    max_shelves = int(math.floor(container.area / 2))
    target_shelves = min(6, max(2, max_shelves))
    shelf_w = min(1.5, container.width / 2)
    shelf_h = min(0.6, container.height / 3)

    shelves = []
    for i in range(target_shelves):
        row, col = divmod(i, 2)
        x = col * (shelf_w + 1.0)
        y = row * (shelf_h + 1.0)
        if x + shelf_w > container.width or y + shelf_h > container.height:
            continue
        category = categories[i % len(categories)]
        shelves.append(Region(
            id=f"shelf-{i + 1}",
            label=f"{category.capitalize()} Shelf {i + 1}",
            category=category,
            x=x, y=y, w=shelf_w, h=shelf_h,
        ))
    return shelves


@dataclass
class LayoutPolicy:
    """Everything that differs between the store and zone granularities."""
    granularity: Granularity
    min_gap: float = 0.0               # meters between any two region edges
    target_utilization: float = 0.75  # fraction of container area
    tolerance: float = 0.05            # optimizer leaves [target - tol, target] alone
    priorities: Dict[str, float] = field(default_factory=dict)
    default_priority: float = 1.0
    min_width: float = 0.5
    min_height: float = 0.3
    max_expansion_ratio: float = 2.0
    premium_fraction: float = 0.35     # right-hand share of width for the priority strategy
    reposition: bool = False           # True: keep the caller's regions, only move/resize
    exit_pattern: str = EXIT_PATTERN
    high_draw_pattern: str = HIGH_DRAW_PATTERN
    seeder: Optional[Callable[[Container, Optional[str]], List[Region]]] = None
    priority_fn: Optional[Callable[[str], float]] = None  # overrides the priorities table

    @property
    def region_noun(self) -> str:
        return "zone" if self.granularity == Granularity.ZONE else "shelf"

    @property
    def payload_key(self) -> str:
        return "zones" if self.granularity == Granularity.ZONE else "shelves"

    def priority_of(self, category: str) -> float:
        if self.priority_fn is not None:
            return self.priority_fn(category)
        return self.priorities.get((category or "").lower(), self.default_priority)

    def normalize_category(self, category: Optional[str], label: str = "") -> str:
        """Known category as given, otherwise inferred from the label."""
        cat = (category or "").strip().lower()
        if cat in KNOWN_CATEGORIES:
            return cat
        return infer_category(f"{cat} {label}")

    def seed_regions(self, container: Container, context_name: Optional[str] = None) -> List[Region]:
        if self.seeder is None:
            return []
        return self.seeder(container, context_name)


ZONE_POLICY = LayoutPolicy(
    granularity=Granularity.ZONE,
    min_gap=0.0,
    target_utilization=0.70,
    priorities=ZONE_PRIORITIES,
    min_width=1.0,
    min_height=1.0,
    reposition=False,
    seeder=seed_store_zones,
)

SHELF_POLICY = LayoutPolicy(
    granularity=Granularity.SHELF,
    min_gap=0.8,
    target_utilization=0.80,
    priorities=SHELF_PRIORITIES,
    min_width=0.5,
    min_height=0.3,
    reposition=True,
    seeder=seed_zone_shelves,
)


def policy_for(granularity: Granularity) -> LayoutPolicy:
    return ZONE_POLICY if granularity == Granularity.ZONE else SHELF_POLICY
