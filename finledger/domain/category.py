"""
Category - an opaque grouping key plus its localized labels as data
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

CATEGORY_KIND_INCOME = "income"
CATEGORY_KIND_EXPENSE = "expense"

FALLBACK_LANGUAGES = ("en", "tn")
FALLBACK_LABEL = "Other"
DEFAULT_COLOR = "#6B7280"


@dataclass(frozen=True)
class Category:
    id: int
    kind: str
    labels: Dict[str, str] = field(default_factory=dict)
    icon: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def from_record(cls, record) -> "Category":
        return cls(
            id=record.id,
            kind=record.kind,
            labels={lbl.language: lbl.text for lbl in record.labels},
            icon=record.icon,
            color=record.color,
        )

    def label(self, language: str = "en") -> str:
        """Requested language, then en, then tn, then "Other"."""
        for lang in (language, *FALLBACK_LANGUAGES):
            text = self.labels.get(lang)
            if text:
                return text
        return FALLBACK_LABEL


def category_label(category: Optional[Category], language: str = "en") -> str:
    """Label for a possibly missing category (uncategorized -> "Other")."""
    if category is None:
        return FALLBACK_LABEL
    return category.label(language)
