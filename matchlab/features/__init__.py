"""Per-team and per-match inputs of the scoring engine."""

from matchlab.features.signals import MatchSignals, SignalBag
from matchlab.features.squad import analyse_squad, identify_critical_absences, squad_quality_score
from matchlab.features.context import match_context

__all__ = [
    "SignalBag",
    "MatchSignals",
    "analyse_squad",
    "identify_critical_absences",
    "squad_quality_score",
    "match_context",
]
