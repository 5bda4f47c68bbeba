from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TextIO


@dataclass
class Item:
    """One row of Alfred Script Filter output."""

    title: str
    subtitle: str = ""
    valid: bool = False
    arg: Optional[str] = None
    quicklookurl: Optional[str] = None
    variables: Dict[str, str] = field(default_factory=dict)
    mods: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def var(self, name: str, value: str) -> "Item":
        self.variables[name] = value
        return self

    def mod(self, key: str, subtitle: str, **extra: Any) -> "Item":
        self.mods[key] = {"subtitle": subtitle, **extra}
        return self

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"title": self.title, "subtitle": self.subtitle, "valid": self.valid}
        if self.arg is not None:
            d["arg"] = self.arg
        if self.quicklookurl is not None:
            d["quicklookurl"] = self.quicklookurl
        if self.variables:
            d["variables"] = dict(self.variables)
        if self.mods:
            d["mods"] = {k: dict(v) for k, v in self.mods.items()}
        return d


@dataclass
class Feedback:
    items: List[Item] = field(default_factory=list)

    def new_item(self, title: str, subtitle: str = "", **kwargs: Any) -> Item:
        item = Item(title=title, subtitle=subtitle, **kwargs)
        self.items.append(item)
        return item

    def to_dict(self) -> Dict[str, Any]:
        return {"items": [item.to_dict() for item in self.items]}

    def send(self, stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        json.dump(self.to_dict(), stream, ensure_ascii=False)
        stream.write("\n")
        stream.flush()
