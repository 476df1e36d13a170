"""
Per-team active PPE item resolution.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable

from ppewatch.analytics.ppe_fields import field_for_display


@dataclass(frozen=True)
class ActiveItems:
    """
    The PPE fields a team currently tracks.
    
    Resolved once per request and handed to every aggregation call. Fields
    outside ``fields`` are ignored even when present in a record.
    """
    fields: FrozenSet[str] = frozenset()
    display_names: Dict[str, str] = field(default_factory=dict)
    
    def __contains__(self, field_name: str) -> bool:
        return field_name in self.fields
    
    def __len__(self) -> int:
        return len(self.fields)
    
    def display_name(self, field_name: str) -> str:
        return self.display_names.get(field_name, field_name)


def resolve_active_items(item_names: Iterable[str]) -> ActiveItems:
    """
    Build the active set from the names of a team's active catalogue items.
    
    Names without a known record field are skipped.
    """
    display_names: Dict[str, str] = {}
    for name in item_names:
        field_name = field_for_display(name)
        if field_name and field_name not in display_names:
            display_names[field_name] = name
    return ActiveItems(fields=frozenset(display_names), display_names=display_names)
