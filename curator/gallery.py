from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from curator.core.localization import text
from curator.models import Memory


ORDERS = ("chronological", "reverse")


class GalleryPresenter:
    """Read-only view over a finished list of memories."""

    def __init__(self, memories: Sequence[Memory], language: str = "en"):
        self._memories: List[Memory] = list(memories)
        self.language = language
        self.order = "chronological"
        self.selected_id: Optional[str] = None

    def set_order(self, order: str) -> None:
        if order not in ORDERS:
            raise ValueError(f"Unknown order '{order}', expected one of {ORDERS}")
        self.order = order

    def ordered(self) -> List[Memory]:
        memories = sorted(self._memories, key=lambda m: m.timestamp)
        if self.order == "reverse":
            memories.reverse()
        return memories

    def exhibit_label(self, index: int) -> str:
        return f"{text(self.language, 'exhibit')} {index + 1:02d}"

    def select(self, memory_id: str) -> Memory:
        for memory in self._memories:
            if memory.id == memory_id:
                self.selected_id = memory_id
                return memory
        raise KeyError(memory_id)

    def close(self) -> None:
        self.selected_id = None

    @property
    def selected(self) -> Optional[Memory]:
        if self.selected_id is None:
            return None
        return next((m for m in self._memories if m.id == self.selected_id), None)

    def cards(self) -> List[Dict[str, Any]]:
        # Exhibit numbers follow interview order regardless of display order.
        numbering = {
            m.id: i for i, m in enumerate(sorted(self._memories, key=lambda m: m.timestamp))
        }
        cards = []
        for memory in self.ordered():
            card = memory.model_dump(by_alias=True)
            card["exhibit"] = self.exhibit_label(numbering[memory.id])
            cards.append(card)
        return cards

    def __len__(self) -> int:
        return len(self._memories)
