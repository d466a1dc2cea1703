from ..extensions import db
from .base import TimestampMixin


class StoreEntry(db.Model, TimestampMixin):
    """One JSON blob per store key (a whole record collection)."""
    __tablename__ = "store_entries"
    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=False)
