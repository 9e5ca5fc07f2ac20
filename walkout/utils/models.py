# walkout/utils/models.py

from dataclasses import dataclass, field
from typing import List, Optional, Dict


@dataclass
class LineItem:
    service_code: str
    tooth: str = ""
    surface: str = ""
    source: str = "unknown"  # 'office' or 'lc3'
    raw: Dict = field(default_factory=dict)  # Original line for traceability

    def __post_init__(self):
        self.service_code = self.service_code or ""
        self.tooth = self.tooth or ""
        self.surface = self.surface or ""


@dataclass
class CompatibilityRule:
    service_code: str
    compatible_codes: List[str] = field(default_factory=list)
    tooth_filter: str = ""
    surface_filter: str = ""

    def allows(self, item: LineItem) -> bool:
        """
        True if the office item passes this rule's tooth/surface filter.
        An empty filter accepts anything.
        """
        if self.tooth_filter and item.tooth != self.tooth_filter:
            return False
        if self.surface_filter and item.surface != self.surface_filter:
            return False
        return True


@dataclass
class AllowableChangeRule:
    original_service: str
    alternative_service: str


@dataclass
class RuleSet:
    compatibility: Dict[str, CompatibilityRule] = field(default_factory=dict)
    allowable_changes: List[AllowableChangeRule] = field(default_factory=list)

    def compatible_codes(self, service_code: str) -> List[str]:
        rule = self.compatibility.get(service_code)
        return list(rule.compatible_codes) if rule else []

    def allowable_change_for(self, service_code: str) -> Optional[AllowableChangeRule]:
        # First rule in load order wins
        for rule in self.allowable_changes:
            if rule.original_service == service_code:
                return rule
        return None

    def is_empty(self) -> bool:
        return not self.compatibility and not self.allowable_changes


@dataclass
class MatchRecord:
    service: str
    service_match: bool
    tooth_surface_match: bool
    match: bool
    matched_with: Optional[str] = None
    match_type: Optional[str] = None  # 'compatible' for substitutions
    tooth: Optional[str] = None
    surface: Optional[str] = None

    @property
    def is_not_found(self) -> bool:
        return not self.service_match

    def to_dict(self) -> Dict:
        record = {
            "Service": self.service,
            "serviceMatch": self.service_match,
            "toothSurfaceMatch": self.tooth_surface_match,
            "match": self.match,
        }
        if self.matched_with is not None:
            record["matchedWith"] = self.matched_with
            record["matchType"] = self.match_type
        if self.is_not_found:
            record["Tooth"] = self.tooth
            record["Surface"] = self.surface
        return record


@dataclass
class AnalysisResult:
    merged_matches: List[MatchRecord]
    overall_match: bool
    summary: Dict[str, int]

    def to_dict(self) -> Dict:
        return {
            "mergedMatches": [m.to_dict() for m in self.merged_matches],
            "overallMatch": self.overall_match,
            "summary": dict(self.summary),
        }
