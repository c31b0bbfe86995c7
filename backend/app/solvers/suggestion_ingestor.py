"""
Turns oracle free text into raw layout candidates.

The oracle is untrusted: its text may hold no JSON, truncated JSON, JSON of
the wrong shape, or numbers that make no geometric sense. Shape problems
reject the whole response (OracleMalformed); nothing is partially salvaged.
Numbers that are merely out of range are clamped, since the pipeline
repairs geometry anyway.
"""
from typing import Dict, List, Optional, Sequence, Set, Union
import json
import logging

import numpy as np
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..schemas.layout import CandidateSource, Container, LayoutCandidate, Region
from ..schemas.policy import LayoutPolicy
from .errors import CardinalityMismatch, OracleMalformed

logger = logging.getLogger(__name__)


# ============================================================================
# PAYLOAD SHAPE
# ============================================================================

class RegionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    label: Optional[str] = Field(None, validation_alias=AliasChoices("name", "label"))
    category: Optional[str] = None
    x: float = Field(..., strict=True, allow_inf_nan=False)
    y: float = Field(..., strict=True, allow_inf_nan=False)
    w: float = Field(..., strict=True, allow_inf_nan=False, validation_alias=AliasChoices("w", "width"))
    h: float = Field(..., strict=True, allow_inf_nan=False, validation_alias=AliasChoices("h", "height"))

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v: Union[str, int, None]) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        raise ValueError("region id must be a string or an integer")


class SuggestionPayload(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    regions: List[RegionPayload] = Field(
        ..., min_length=1, validation_alias=AliasChoices("regions", "zones", "shelves")
    )


class ResponsePayload(BaseModel):
    suggestions: List[SuggestionPayload] = Field(..., min_length=1)


# ============================================================================
# EXTRACTION
# ============================================================================

def extract_payload(text: str) -> Optional[str]:
    """First balanced {...} span of text, or None.

    Braces inside JSON strings don't count, and backslash escapes inside
    strings are honoured.
    """
    if not text:
        return None
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def parse_response(text: str) -> ResponsePayload:
    """Extract and shape-check the payload; any deviation raises OracleMalformed."""
    span = extract_payload(text)
    if span is None:
        raise OracleMalformed("no JSON object found in oracle response")
    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        raise OracleMalformed(f"payload is not valid JSON: {e}") from e
    try:
        return ResponsePayload.model_validate(data)
    except ValidationError as e:
        raise OracleMalformed(f"payload has unexpected shape: {e.error_count()} error(s)") from e


# ============================================================================
# INGESTION
# ============================================================================

class SuggestionIngestor:
    def __init__(self, container: Container, policy: LayoutPolicy):
        self.container = container
        self.policy = policy
        self.min_width = min(policy.min_width, container.width)
        self.min_height = min(policy.min_height, container.height)

    def _clamped_region(self, entry: RegionPayload, rid: str, label: str, category: str) -> Region:
        W, H = self.container.width, self.container.height
        w = float(np.clip(entry.w, self.min_width, W))
        h = float(np.clip(entry.h, self.min_height, H))
        return Region(
            id=rid,
            label=label,
            category=category,
            x=float(np.clip(entry.x, 0.0, W - w)),
            y=float(np.clip(entry.y, 0.0, H - h)),
            w=w,
            h=h,
        )

    def _reposition(self, entries: Sequence[RegionPayload], existing: Sequence[Region]) -> List[Region]:
        """Map entries onto the existing set: echoed ids first, then by position.

        Matching is per existing region, not per id, so repeated ids in the
        existing set still pair one-to-one.
        """
        assigned: List[Optional[int]] = [None] * len(entries)
        taken: Set[int] = set()
        for i, entry in enumerate(entries):
            if entry.id is None:
                continue
            for j, r in enumerate(existing):
                if j not in taken and r.id == entry.id:
                    assigned[i] = j
                    taken.add(j)
                    break
        remaining = iter([j for j in range(len(existing)) if j not in taken])
        for i in range(len(entries)):
            if assigned[i] is None:
                assigned[i] = next(remaining)

        return [
            self._clamped_region(entry, existing[j].id, existing[j].label, existing[j].category)
            for entry, j in zip(entries, assigned)
        ]

    def _fresh_id(self, c: int, r_idx: int, reserved: Set[str]) -> str:
        rid = f"ai-{c}-{r_idx}"
        k = 1
        while rid in reserved:
            rid = f"ai-{c}-{r_idx}-{k}"
            k += 1
        return rid

    def _generate(self, c: int, entries: Sequence[RegionPayload], existing: Sequence[Region]) -> List[Region]:
        """New region set; ids borrowed from existing regions matched by id or label.

        Fresh ids never collide with an existing id or with one already handed out.
        """
        by_id = {r.id: r for r in existing}
        by_label: Dict[str, Region] = {}
        for r in existing:
            by_label.setdefault(r.label.strip().lower(), r)
        existing_ids = set(by_id)
        used: Set[str] = set()

        regions = []
        for r_idx, entry in enumerate(entries):
            match = by_id.get(entry.id) if entry.id else None
            if match is None and entry.label:
                match = by_label.get(entry.label.strip().lower())
            if match is not None and match.id in used:
                match = None

            if match is not None:
                rid = match.id
            else:
                rid = self._fresh_id(c, r_idx, existing_ids | used)
            used.add(rid)
            label = entry.label or (match.label if match else f"{self.policy.region_noun.capitalize()} {r_idx + 1}")
            category = self.policy.normalize_category(entry.category or (match.category if match else None), label)
            regions.append(self._clamped_region(entry, rid, label, category))
        return regions

    def ingest(self, text: str, existing: Sequence[Region], request_id: int = 0) -> List[LayoutCandidate]:
        """Raw (unresolved) candidates from oracle text.

        Raises OracleMalformed when the text is unusable and, in reposition
        mode, CardinalityMismatch when no suggestion has the existing count.
        """
        return self.candidates_from(parse_response(text), existing, request_id)

    def candidates_from(self,
                        payload: ResponsePayload,
                        existing: Sequence[Region],
                        request_id: int = 0) -> List[LayoutCandidate]:
        candidates = []
        received = []

        for c, suggestion in enumerate(payload.suggestions):
            if self.policy.reposition:
                received.append(len(suggestion.regions))
                if len(suggestion.regions) != len(existing):
                    logger.warning(
                        "Discarding suggestion %d: %d %s for %d existing",
                        c, len(suggestion.regions), self.policy.payload_key, len(existing),
                    )
                    continue
                regions = self._reposition(suggestion.regions, existing)
            else:
                regions = self._generate(c, suggestion.regions, existing)

            candidates.append(LayoutCandidate(
                name=suggestion.name or f"AI Layout {c + 1}",
                description=suggestion.description or "AI-generated layout",
                rectangles=regions,
                source=CandidateSource.ORACLE,
                request_id=request_id,
            ))

        if not candidates:
            raise CardinalityMismatch(len(existing), received)
        return candidates
