"""
Shared guards for use cases
"""
from finledger.domain.errors import NotFoundError


def ensure_owned(record, owner_id: str, kind: str):
    """Records of other owners are reported as missing, not as forbidden."""
    if record.owner_id != owner_id:
        raise NotFoundError(kind, record.id)
    return record


def ensure_visible_category(store, owner_id: str, category_id: int):
    """The owner's own categories and shared defaults (owner_id NULL) are visible."""
    category = store.get_category(category_id)
    if category.owner_id is not None and category.owner_id != owner_id and not category.is_default:
        raise NotFoundError("Category", category_id)
    return category
