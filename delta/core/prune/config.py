from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PruneConfig(BaseModel):
    """Tuning knobs for a pruning analysis run.

    Accepts both snake_case field names and the camelCase names used by the
    extension's tool arguments (``minContentLength``). Values are taken
    as-is; nonsensical values degrade the analysis but never crash it.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    stale_age_days: float = 30
    min_score_threshold: float = 30
    check_files: bool = True
    check_branches: bool = True
    check_completed: bool = True
    detect_duplicates: bool = True
    duplicate_similarity: float = 0.8
    min_content_length: float = 10
    git_timeout_seconds: float = 5.0

    @classmethod
    def resolve(
        cls, overrides: PruneConfig | Mapping[str, Any] | None = None
    ) -> PruneConfig:
        """Merge caller overrides over the defaults."""
        if overrides is None:
            return cls()
        if isinstance(overrides, PruneConfig):
            return overrides
        return cls.model_validate(dict(overrides))
