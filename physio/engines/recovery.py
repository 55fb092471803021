"""Recovery trajectory: tissue-healing baseline scaled by severity and age."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from physio.schemas.consult import Prognosis
from physio.schemas.intake import parse_age

logger = logging.getLogger(__name__)

FALLBACK_CATEGORY = "non_specific_mechanical"

# Checked in order; the first family with a keyword in the id wins.
TISSUE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "nerve_root",
        (
            "radiculopathy",
            "myelopathy",
            "herniation",
            "stenosis",
            "neuroma",
            "carpal_tunnel",
            "thoracic_outlet",
            "piriformis",
        ),
    ),
    (
        "tendon_ligament",
        ("tendinopathy", "epicondylalgia", "fasciitis", "tenosynovitis", "sprain", "tear", "iliotibial"),
    ),
    (
        "joint_degenerative",
        ("osteoarthritis", "capsulitis", "impingement", "facet", "spondylolisthesis", "sacroiliac"),
    ),
    (
        "acute_soft_tissue",
        ("torticollis", "whiplash", "costochondritis", "strain", "spasm"),
    ),
)

BASELINE_WEEKS: dict[str, tuple[int, int]] = {
    "nerve_root": (6, 12),
    "tendon_ligament": (4, 12),
    "joint_degenerative": (8, 16),
    "acute_soft_tissue": (2, 6),
    FALLBACK_CATEGORY: (4, 8),
}

SEVERITY_MULTIPLIERS: dict[str, float] = {
    "mild": 0.75,
    "moderate": 1.0,
    "severe": 1.5,
}

AGE_THRESHOLD = 50
AGE_MAX_EXTENSION = 0.2


def classify_tissue(diagnosis_id: str) -> str:
    """Maps a diagnosis id onto a tissue-healing category by keyword family."""
    key = (diagnosis_id or "").lower()
    for category, keywords in TISSUE_KEYWORDS:
        if any(keyword in key for keyword in keywords):
            return category
    return FALLBACK_CATEGORY


class RecoveryTrajectoryEngine:
    """Estimates a recovery window in whole weeks."""

    def predict(
        self,
        diagnosis_id: str,
        severity: str = "moderate",
        profile: Mapping[str, Any] | None = None,
    ) -> Prognosis:
        """Returns ``weeks_min``/``weeks_max`` for the diagnosis.

        Both bounds are scaled by the severity multiplier. Patients older than
        50 get ``weeks_max`` extended by 20%. Unknown ids use the non-specific
        mechanical baseline and unknown severities count as moderate.
        """
        category = classify_tissue(diagnosis_id)
        base_min, base_max = BASELINE_WEEKS[category]

        tier = (severity or "moderate").strip().lower()
        multiplier = SEVERITY_MULTIPLIERS.get(tier)
        if multiplier is None:
            logger.warning("Unknown severity tier '%s' — treating as moderate.", severity)
            multiplier = SEVERITY_MULTIPLIERS["moderate"]

        age = parse_age((profile or {}).get("age"))
        age_factor = 1.0 + AGE_MAX_EXTENSION if age is not None and age > AGE_THRESHOLD else 1.0

        weeks_min = max(1, int(base_min * multiplier + 0.5))
        # Rounded first so float noise (e.g. 12.000000000000002) cannot add a week.
        weeks_max = max(weeks_min, math.ceil(round(base_max * multiplier * age_factor, 6)))
        return Prognosis(weeks_min=weeks_min, weeks_max=weeks_max, tissue_category=category)
