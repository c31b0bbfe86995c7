"""
LLM Prompt Templates for Retail Layout Suggestions

These prompts are designed to:
1. Describe the container and its current regions in meters
2. Ask for three strategies (flow, revenue, operations)
3. Pin the coordinate system (top-left origin, y grows downward)
4. Pin the JSON response shape the suggestion ingestor accepts
"""
from typing import Sequence

from ..schemas.layout import Container, Region
from ..schemas.policy import KNOWN_CATEGORIES, LayoutPolicy, ZONE_SHELF_CATEGORIES, infer_category

BASE_SYSTEM_PROMPT = """You are an expert retail store layout designer.
You arrange rectangular areas inside a rectangular floor so that customers
move naturally through the space and every area stays reachable.

Important rules:
- All measurements are in meters
- Coordinates start at (0,0) in the top-left corner; x grows right, y grows down
- Each rectangle's (x, y) is its TOP-LEFT corner
- Rectangles never overlap and never leave the floor
- Return valid JSON only, no commentary
"""

STRATEGY_GUIDELINES = """Create 3 different layout strategies:

STRATEGY 1 - CUSTOMER FLOW OPTIMIZATION:
- Place high-attraction categories (electronics, featured, promotions) near the entrance
- Create natural walking paths through the space
- Position checkout/cash counters near the exit
- Ensure smooth traffic flow without bottlenecks

STRATEGY 2 - REVENUE MAXIMIZATION:
- Position high-margin categories in prime real estate
- Use the power wall (right-hand side) for the top category
- Place impulse-buy items near checkout

STRATEGY 3 - OPERATIONAL EFFICIENCY:
- Group areas by supply chain logistics
- Minimize staff walking distances
- Optimize for easy restocking and inventory management
"""

# Shape the ingestor validates; keys other than these are ignored
RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "suggestions": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "regions": {
                        "type": "array",
                        "minItems": 1,
                        "items": {
                            "type": "object",
                            "properties": {
                                "id": {"type": "string"},
                                "name": {"type": "string"},
                                "category": {"type": "string"},
                                "x": {"type": "number"},
                                "y": {"type": "number"},
                                "width": {"type": "number", "exclusiveMinimum": 0},
                                "height": {"type": "number", "exclusiveMinimum": 0}
                            },
                            "required": ["x", "y", "width", "height"]
                        }
                    }
                },
                "required": ["regions"]
            }
        }
    },
    "required": ["suggestions"]
}


def _describe(regions: Sequence[Region]) -> str:
    return "\n".join(
        f"- id={r.id} name=\"{r.label}\" category={r.category}: {r.w:g}m x {r.h:g}m "
        f"({r.area:g}m²) at ({r.x:g}, {r.y:g})"
        for r in regions
    )


def build_layout_prompt(container: Container,
                        regions: Sequence[Region],
                        policy: LayoutPolicy,
                        context_name: str = "") -> str:
    """User prompt asking for three suggestions for one container."""
    noun = policy.region_noun
    key = policy.payload_key
    total = sum(r.area for r in regions)
    utilization = round(100 * total / container.area) if container.area > 0 else 0
    where = f" \"{context_name}\"" if context_name else ""
    floor = "zone" if noun == "shelf" else "store"

    lines = [
        f"Create 3 optimal {noun} layout suggestions for the {container.width:g}m x "
        f"{container.height:g}m {floor}{where} ({container.area:g}m² total area).",
        "",
        f"{key.upper()} TO ARRANGE:",
        _describe(regions) if regions else "(none yet, propose a starter set)",
        f"Total {noun} area: {total:g}m² ({utilization}% of the floor)",
        "",
        "CRITICAL REQUIREMENTS:",
        f"1. NO OVERLAPPING {key.upper()}",
        f"2. Every {noun} fits completely within {container.width:g}m x {container.height:g}m",
    ]
    if policy.min_gap > 0:
        lines.append(f"3. Keep at least {policy.min_gap:g}m of aisle between any two {key}")
    else:
        lines.append(f"3. Leave walkways between {key} where possible")
    if policy.reposition:
        lines.append(
            f"4. Return EXACTLY {len(regions)} {key} per suggestion, reusing the ids above; "
            "only x, y, width and height may change"
        )
    else:
        if noun == "zone":
            categories = KNOWN_CATEGORIES
        else:
            categories = ZONE_SHELF_CATEGORIES.get(infer_category(context_name), ZONE_SHELF_CATEGORIES["general"])
        lines.append(f"4. Use categories from: {', '.join(categories)}")
    lines += [
        "",
        STRATEGY_GUIDELINES,
        "RESPONSE FORMAT - Return valid JSON only:",
        "{",
        '  "suggestions": [',
        "    {",
        '      "name": "Customer Flow Optimized Layout",',
        '      "description": "How the layout guides customers",',
        f'      "{key}": [',
        '        {"id": "...", "name": "...", "category": "...", "x": 0, "y": 0, "width": 2, "height": 1}',
        "      ]",
        "    }",
        "  ]",
        "}",
        "",
        f"IMPORTANT: Double-check that no {key} overlap and all fit within "
        f"{container.width:g}m x {container.height:g}m!",
    ]
    return "\n".join(lines)
