"""Weight tables, tier breakpoints and archetype rules.

All values here are product-tuning constants. They are bundled in a
``CalibrationProfile`` that validates itself on construction, so a broken
table fails at import (or when a custom profile is built), never mid-request.
Callers may pass their own profile to any scoring entry point.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from portfolio_scanner.core.exceptions import ConfigurationError
from portfolio_scanner.core.schemas_dimensions import Dimension, Tier

WEIGHT_TOLERANCE = 1e-6

A = Dimension.ACADEMIC_EXCELLENCE
L = Dimension.LEADERSHIP_INITIATIVE
C = Dimension.INTELLECTUAL_CURIOSITY
M = Dimension.COMMUNITY_IMPACT
V = Dimension.AUTHENTICITY_VOICE
F = Dimension.FUTURE_READINESS

DEFAULT_WEIGHT_TABLES: dict[str, dict[Dimension, float]] = {
    "general": {A: 0.30, L: 0.20, C: 0.20, M: 0.10, V: 0.10, F: 0.10},
    # Research-university emphasis: rigor and curiosity
    "berkeley": {A: 0.35, L: 0.10, C: 0.25, M: 0.10, V: 0.10, F: 0.10},
    # Holistic emphasis: leadership, service and voice
    "ucla": {A: 0.25, L: 0.20, C: 0.15, M: 0.15, V: 0.15, F: 0.10},
}

MODE_ALIASES = {"general_uc": "general", "uc_berkeley": "berkeley"}

TOP_TIER_CAMPUSES = ("UC Berkeley", "UCLA")
MID_TIER_CAMPUSES = ("UC San Diego", "UC Davis", "UC Irvine", "UC Santa Barbara")
ACCESSIBLE_CAMPUSES = ("UC Santa Cruz", "UC Riverside", "UC Merced")


def round_score(value: float) -> float:
    """Round half-up to one decimal."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class TierBreakpoints:
    """Lower bounds (inclusive) of each tier above foundational."""

    exceptional: float = 9.0
    strong: float = 7.0
    developing: float = 4.0

    def __post_init__(self) -> None:
        if not (0.0 < self.developing < self.strong < self.exceptional <= 10.0):
            raise ConfigurationError(
                "Tier breakpoints must satisfy 0 < developing < strong < exceptional <= 10, "
                f"got {self.developing}/{self.strong}/{self.exceptional}"
            )

    def tier_for(self, score: float) -> Tier:
        if score >= self.exceptional:
            return Tier.EXCEPTIONAL
        if score >= self.strong:
            return Tier.STRONG
        if score >= self.developing:
            return Tier.DEVELOPING
        return Tier.FOUNDATIONAL


@dataclass(frozen=True)
class GpaBands:
    """GPA cut-offs for the heuristic academic ladder (best of weighted or unweighted)."""

    top: float = 4.2
    mid: float = 4.0
    floor: float = 3.7

    def __post_init__(self) -> None:
        if not (0.0 < self.floor < self.mid < self.top):
            raise ConfigurationError(
                "GPA bands must satisfy 0 < floor < mid < top, "
                f"got {self.floor}/{self.mid}/{self.top}"
            )


# Selective campuses admit around a 4.15-4.3 weighted GPA
DEFAULT_GPA_BANDS: dict[str, GpaBands] = {
    "general": GpaBands(),
    "berkeley": GpaBands(top=4.3, mid=4.15, floor=3.9),
    "ucla": GpaBands(top=4.3, mid=4.15, floor=3.9),
}


class Archetype(str, Enum):
    SCHOLAR = "Scholar"
    LEADER = "Leader"
    WELL_ROUNDED = "Well-Rounded"
    SPECIALIST = "Specialist"
    EMERGING = "Emerging"


@dataclass(frozen=True)
class ArchetypeThresholds:
    scholar_academic: float = 8.0
    scholar_curiosity: float = 7.0
    leader_leadership: float = 7.0
    leader_community: float = 7.0
    well_rounded_floor: float = 6.0
    specialist_peak: float = 8.0


Scores = Mapping[Dimension, float]
ArchetypeRule = tuple[Archetype, Callable[[Scores, ArchetypeThresholds], bool]]

# First match wins; order is part of the contract.
ARCHETYPE_PRECEDENCE: tuple[ArchetypeRule, ...] = (
    (
        Archetype.SCHOLAR,
        lambda s, t: s[A] >= t.scholar_academic and s[C] >= t.scholar_curiosity,
    ),
    (
        Archetype.LEADER,
        lambda s, t: s[L] >= t.leader_leadership and s[M] >= t.leader_community,
    ),
    (
        Archetype.WELL_ROUNDED,
        lambda s, t: all(s[d] >= t.well_rounded_floor for d in Dimension),
    ),
    (
        Archetype.SPECIALIST,
        lambda s, t: max(s[d] for d in Dimension) >= t.specialist_peak,
    ),
)

DEFAULT_PERCENTILE_BUCKETS: tuple[tuple[float, str], ...] = (
    (8.0, "Top 10-20%"),
    (7.0, "Top 25-40%"),
)


def _validate_weight_table(mode: str, table: Mapping[Dimension, float]) -> None:
    missing = [d.value for d in Dimension if d not in table]
    if missing:
        raise ConfigurationError(f"Weight table '{mode}' is missing {', '.join(missing)}")
    if any(w < 0 for w in table.values()):
        raise ConfigurationError(f"Weight table '{mode}' has a negative weight")
    total = sum(table[d] for d in Dimension)
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ConfigurationError(f"Weight table '{mode}' sums to {total}, expected 1.0")


@dataclass(frozen=True)
class CalibrationProfile:
    """Every tunable number the scoring pipeline uses."""

    weight_tables: Mapping[str, Mapping[Dimension, float]] = field(
        default_factory=lambda: DEFAULT_WEIGHT_TABLES
    )
    tier_breakpoints: Mapping[Dimension, TierBreakpoints] = field(
        default_factory=lambda: {d: TierBreakpoints() for d in Dimension}
    )
    overall_breakpoints: TierBreakpoints = field(default_factory=TierBreakpoints)
    archetype_thresholds: ArchetypeThresholds = field(default_factory=ArchetypeThresholds)
    archetype_rules: tuple[ArchetypeRule, ...] = ARCHETYPE_PRECEDENCE
    percentile_buckets: tuple[tuple[float, str], ...] = DEFAULT_PERCENTILE_BUCKETS
    percentile_floor: str = "Top 50%"
    gpa_bands: Mapping[str, GpaBands] = field(default_factory=lambda: DEFAULT_GPA_BANDS)

    def __post_init__(self) -> None:
        if not self.weight_tables:
            raise ConfigurationError("At least one weight table is required")
        frozen_tables = {}
        for mode, table in self.weight_tables.items():
            _validate_weight_table(mode, table)
            frozen_tables[mode] = MappingProxyType(dict(table))
        missing = [d.value for d in Dimension if d not in self.tier_breakpoints]
        if missing:
            raise ConfigurationError(f"Tier breakpoints missing for {', '.join(missing)}")

        # Read-only views so shared profiles cannot be mutated at runtime
        object.__setattr__(self, "weight_tables", MappingProxyType(frozen_tables))
        object.__setattr__(
            self, "tier_breakpoints", MappingProxyType(dict(self.tier_breakpoints))
        )
        object.__setattr__(self, "gpa_bands", MappingProxyType(dict(self.gpa_bands)))

    @property
    def modes(self) -> list[str]:
        return sorted(self.weight_tables)

    def normalize_mode(self, mode: str | None) -> str:
        """
        Resolve a requested mode name.

        Raises:
            ConfigurationError: If the mode has no weight table
        """
        if not isinstance(mode, str) or not mode.strip():
            raise ConfigurationError("Evaluation mode is required")
        key = mode.strip().lower()
        key = MODE_ALIASES.get(key, key)
        if key not in self.weight_tables:
            raise ConfigurationError(
                f"Unknown evaluation mode '{mode}'. Known modes: {', '.join(self.modes)}"
            )
        return key

    def resolve_weights(self, mode: str) -> Mapping[Dimension, float]:
        return self.weight_tables[self.normalize_mode(mode)]

    def gpa_bands_for(self, mode: str | None) -> GpaBands:
        """GPA bands for a mode; modes without their own bands use the general ones."""
        key = (mode or "general").strip().lower()
        key = MODE_ALIASES.get(key, key)
        return self.gpa_bands.get(key) or self.gpa_bands.get("general", GpaBands())

    def tier_for(self, dimension: Dimension, score: float) -> Tier:
        return self.tier_breakpoints[dimension].tier_for(score)

    def overall_tier(self, score: float) -> Tier:
        return self.overall_breakpoints.tier_for(score)

    def archetype_for(self, scores: Scores) -> Archetype:
        for archetype, rule in self.archetype_rules:
            if rule(scores, self.archetype_thresholds):
                return archetype
        return Archetype.EMERGING

    def percentile_for(self, score: float) -> str:
        for floor, label in self.percentile_buckets:
            if score >= floor:
                return label
        return self.percentile_floor


DEFAULT_CALIBRATION = CalibrationProfile()


def resolve_weights(
    mode: str, calibration: CalibrationProfile = DEFAULT_CALIBRATION
) -> Mapping[Dimension, float]:
    """
    Look up the weight table for an evaluation mode.

    Raises:
        ConfigurationError: If the mode is unknown
    """
    return calibration.resolve_weights(mode)


def compute_overall_score(scores: Scores, weights: Mapping[Dimension, float]) -> float:
    """
    Weighted sum of the six dimension scores, rounded to one decimal.

    Summation order is fixed (Dimension declaration order) so results are
    reproducible bit for bit.
    """
    total = 0.0
    for dimension in Dimension:
        total += scores[dimension] * weights[dimension]
    return round_score(total)
