"""Named, typed table columns and their JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .base import DataTypeMeta, TypeCode
from .registry import meta_from_dict


@dataclass
class Column:
    """A column of a table: its name and the meta of its type."""

    name: str
    meta: DataTypeMeta

    def code(self) -> TypeCode:
        return self.meta.code

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": int(self.code()), "meta": self.meta.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Column:
        try:
            name = data["name"]
            code = data["type"]
        except KeyError as exc:
            raise ValueError(f"column is missing field {exc.args[0]!r}") from None
        return cls(name=name, meta=meta_from_dict(code, data.get("meta")))

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> Column:
        return cls.from_dict(json.loads(text))