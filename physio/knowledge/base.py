"""The central reference repository: dermatomes, pathology signatures, red flags.

Built once per process and read-only afterwards, so a single instance is safe
to share between concurrent consults.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pydantic import ValidationError

from physio.errors import KnowledgeBaseError
from physio.knowledge import tables
from physio.schemas.knowledge import PathologySignature

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """Validated, immutable view over the reference tables.

    Attributes:
        dermatomes: Nerve-root level -> tuple of skin-region tags, in lookup order.
        signatures: Pathology id -> :class:`PathologySignature`, in table order.
        red_flag_criteria: Condition id -> frozenset of intake tags.
        intake_tags: The recognised intake-tag vocabulary.

    Raises:
        KnowledgeBaseError: On duplicate signature ids, priors outside [0, 1],
            empty red-flag criteria, or criterion tags the intake can never
            produce. Any of these must stop the process at start-up.
    """

    def __init__(
        self,
        dermatomes: Mapping[str, Iterable[str]] | None = None,
        signatures: Iterable[Mapping] | None = None,
        red_flag_criteria: Mapping[str, Iterable[str]] | None = None,
        intake_tags: Iterable[str] | None = None,
    ) -> None:
        raw_dermatomes = tables.DERMATOMES if dermatomes is None else dermatomes
        raw_signatures = tables.PATHOLOGY_SIGNATURES if signatures is None else signatures
        raw_criteria = tables.RED_FLAG_CRITERIA if red_flag_criteria is None else red_flag_criteria
        vocabulary = tables.INTAKE_TAGS if intake_tags is None else intake_tags

        self.intake_tags: frozenset[str] = frozenset(vocabulary)
        self.dermatomes = MappingProxyType(
            {level: tuple(areas) for level, areas in raw_dermatomes.items()}
        )
        self.signatures = MappingProxyType(self._load_signatures(raw_signatures))
        self.red_flag_criteria = MappingProxyType(self._load_criteria(raw_criteria))

        logger.info(
            "Knowledge base loaded: %d signatures, %d red-flag conditions, %d dermatomes.",
            len(self.signatures),
            len(self.red_flag_criteria),
            len(self.dermatomes),
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_dermatome(self, location: str) -> str | None:
        """Returns the nerve-root level whose map covers *location*.

        Matching is substring-tolerant in both directions to absorb free-text
        variance (``"heel_pain"`` finds ``heel`` under S1). The first level in
        table order wins; blank input never matches.
        """
        query = (location or "").strip().lower()
        if not query:
            return None
        for level, areas in self.dermatomes.items():
            if any(query in area or area in query for area in areas):
                return level
        return None

    def signature(self, pathology_id: str) -> PathologySignature | None:
        return self.signatures.get(pathology_id)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _load_signatures(rows: Iterable[Mapping]) -> dict[str, PathologySignature]:
        loaded: dict[str, PathologySignature] = {}
        for index, row in enumerate(rows):
            try:
                signature = PathologySignature.model_validate(dict(row))
            except ValidationError as exc:
                raise KnowledgeBaseError(
                    f"Invalid pathology signature at row {index}: {exc.errors()[0]['msg']}",
                    details={"row": index, "id": row.get("id")},
                ) from exc
            if signature.id in loaded:
                raise KnowledgeBaseError(
                    f"Duplicate pathology signature id '{signature.id}'.",
                    details={"id": signature.id},
                )
            loaded[signature.id] = signature
        return loaded

    def _load_criteria(self, criteria: Mapping[str, Iterable[str]]) -> dict[str, frozenset[str]]:
        loaded: dict[str, frozenset[str]] = {}
        for condition_id, tags in criteria.items():
            tag_set = frozenset(tags)
            if not tag_set:
                raise KnowledgeBaseError(
                    f"Red-flag condition '{condition_id}' has no criterion tags.",
                    details={"condition_id": condition_id},
                )
            unknown = sorted(tag_set - self.intake_tags)
            if unknown:
                raise KnowledgeBaseError(
                    f"Red-flag condition '{condition_id}' references tags the intake "
                    f"cannot produce: {', '.join(unknown)}.",
                    details={"condition_id": condition_id, "unknown_tags": unknown},
                )
            loaded[condition_id] = tag_set
        return loaded
