# Role: Tagged union for chip actions. parse_action() turns the backend's loosely-shaped action dict into
# one of four variants so the session controller dispatches on type instead of poking at fields.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Union


@dataclass(frozen=True)
class ToggleLocal:
    group: str
    value: str


@dataclass(frozen=True)
class SubmitSelection:
    # Key line: each submit variant knows its selection group, outbound action type and echo wording.
    group: ClassVar[str] = ""
    outbound_type: ClassVar[str] = ""
    label: ClassVar[str] = ""
    empty_label: ClassVar[str] = ""

    def summary(self, values: list[str]) -> str:
        if not values:
            return self.empty_label
        return f"{self.label}: {', '.join(values)}"

    def outbound_action(self, values: list[str]) -> Dict[str, Any]:
        return {"type": self.outbound_type, "data": list(values)}


@dataclass(frozen=True)
class SubmitCuisines(SubmitSelection):
    group: ClassVar[str] = "cuisine"
    outbound_type: ClassVar[str] = "refine_set_cuisines"
    label: ClassVar[str] = "Cuisines"
    empty_label: ClassVar[str] = "No cuisine preference"


@dataclass(frozen=True)
class SubmitAreas(SubmitSelection):
    group: ClassVar[str] = "area"
    outbound_type: ClassVar[str] = "refine_set_areas"
    label: ClassVar[str] = "Areas"
    empty_label: ClassVar[str] = "No area preference"


@dataclass(frozen=True)
class Generic:
    payload: Dict[str, Any] = field(default_factory=dict)


Action = Union[ToggleLocal, SubmitCuisines, SubmitAreas, Generic]

SUBMIT_CUISINES_TYPE = "submit_refine_cuisines"
SUBMIT_AREAS_TYPE = "submit_refine_areas"


def parse_action(raw: Mapping[str, Any] | None) -> Action:
    # 1) Client-only toggle: needs both group and value, otherwise it's just forwarded
    # 2) Submit buttons for the two multi-select groups
    # 3) Everything else goes to the backend untouched
    a = dict(raw or {})
    kind = a.get("type")

    if a.get("clientOnly") and kind == "toggle" and a.get("group") and a.get("value"):
        return ToggleLocal(group=str(a["group"]), value=str(a["value"]))

    if kind == SUBMIT_CUISINES_TYPE:
        return SubmitCuisines()

    if kind == SUBMIT_AREAS_TYPE:
        return SubmitAreas()

    return Generic(payload=a)
