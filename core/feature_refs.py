# core/feature_refs.py

from typing import Literal, Optional

from pydantic import BaseModel

from core import db
from core.utils import is_uuid


class FeatureRef(BaseModel):
    """
    A reference to a feature by id or by name. Built once from the
    request's ``featureKey``; everything after that works on ``kind``.
    """

    kind: Literal["id", "name"]
    value: str

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, raw: str) -> "FeatureRef":
        raw = (raw or "").strip()
        if is_uuid(raw):
            return cls(kind="id", value=raw.lower())
        return cls(kind="name", value=raw)

    @property
    def column(self) -> str:
        return "id" if self.kind == "id" else "name"

    def __str__(self):
        return self.value


def resolve_feature(ref: FeatureRef) -> Optional[dict]:
    """Load the feature row the reference points at, or None."""
    return db.select_one("features", eq={ref.column: ref.value})
