"""Differential diagnosis: weighted multi-attribute matching of signatures."""

from __future__ import annotations

import logging

from physio.knowledge.base import KnowledgeBase
from physio.schemas.consult import DiagnosisCandidate, SymptomSnapshot

logger = logging.getLogger(__name__)

# Region is the most specific signal, aggravators the least. Sum is 1.
CATEGORY_WEIGHTS: dict[str, float] = {
    "regions": 0.5,
    "quality": 0.3,
    "aggravators": 0.2,
}

# Snapshot field -> signature field
_SNAPSHOT_FIELDS = {
    "locations": "regions",
    "quality": "quality",
    "aggravators": "aggravators",
}

TOP_N = 5


def _overlap(observed: frozenset[str], reference: frozenset[str]) -> float:
    if not reference:
        return 0.0
    return len(observed & reference) / len(reference)


class DifferentialDiagnosisEngine:
    """Ranks pathology signatures against a symptom snapshot.

    ``raw`` is the weighted overlap in [0, 1]. The reported score is
    ``raw * (1 + probability_base)`` so the prior can at most double a match
    but never lifts a weak match over a strong one. Signatures with no overlap
    at all are not reported.

    This deliberately inverts the older ``probability_base * (1 + raw)``
    weighting. That form lets a common but poorly matched condition outrank a
    well-matched rarer one: for radicular leg pain it puts
    mechanical_low_back_pain (prior 0.4) above lumbar_disc_herniation (0.2).
    """

    def __init__(self, knowledge_base: KnowledgeBase, top_n: int = TOP_N) -> None:
        self.kb = knowledge_base
        self.top_n = top_n

    def analyze(self, snapshot: SymptomSnapshot) -> list[DiagnosisCandidate]:
        """Returns up to ``top_n`` candidates, best first.

        Ties on score are broken by prior (higher first) and then by id so the
        ordering is fully deterministic. An empty snapshot yields ``[]``.
        """
        if snapshot.is_empty():
            return []

        observed = {
            signature_field: frozenset(getattr(snapshot, snapshot_field))
            for snapshot_field, signature_field in _SNAPSHOT_FIELDS.items()
        }

        scored: list[tuple[float, float, str]] = []
        for signature in self.kb.signatures.values():
            raw = sum(
                weight * _overlap(observed[category], getattr(signature, category))
                for category, weight in CATEGORY_WEIGHTS.items()
            )
            if raw <= 0.0:
                continue
            score = round(raw * (1.0 + signature.probability_base), 4)
            scored.append((score, signature.probability_base, signature.id))

        scored.sort(key=lambda item: (-item[0], -item[1], item[2]))
        candidates = [
            DiagnosisCandidate(pathology_id=pathology_id, score=score)
            for score, _, pathology_id in scored[: self.top_n]
        ]
        logger.debug(
            "Differential: %d of %d signatures matched; top=%s",
            len(scored),
            len(self.kb.signatures),
            candidates[0].pathology_id if candidates else None,
        )
        return candidates
