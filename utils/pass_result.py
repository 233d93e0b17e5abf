"""
Summary of one processing pass over eligible applications.
"""

from typing import Any, Dict


class PassResult:
    """Counts collected while a bot processor walks its eligible applications."""

    def __init__(self, kind: str, eligible_count: int = 0):
        """
        Initialize an empty pass summary.

        Args:
            kind: Which processor ran ("automation" or "mimic")
            eligible_count: Number of applications the eligibility query returned
        """
        self.kind = kind
        self.eligible_count = eligible_count
        self.processed_count = 0
        self.skipped_count = 0
        self.failed_count = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "eligible_count": self.eligible_count,
            "processed_count": self.processed_count,
            "skipped_count": self.skipped_count,
            "failed_count": self.failed_count,
        }

    def __repr__(self) -> str:
        return (
            f"PassResult(kind={self.kind!r}, eligible={self.eligible_count}, "
            f"processed={self.processed_count}, skipped={self.skipped_count}, "
            f"failed={self.failed_count})"
        )
