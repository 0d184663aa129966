"""Position book persistence for the DCA engine."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from dca.position import Confirmation, Position


@dataclass
class PositionBook:
    positions: list[Position] = field(default_factory=list)
    last_block_height: int | None = None

    def add(self, position: Position) -> None:
        self.positions.append(position)

    def get(self, position_id: str) -> Position | None:
        for position in self.positions:
            if position.id == position_id:
                return position
        return None

    def remove(self, position_id: str) -> Position | None:
        position = self.get(position_id)
        if position is not None:
            self.positions.remove(position)
        return position

    def active(self) -> list[Position]:
        return [position for position in self.positions if position.is_active]

    def pending(self) -> list[Position]:
        return [
            position
            for position in self.positions
            if position.is_active and position.confirmation == Confirmation.PENDING
        ]

    def replace(self, positions: Iterable[Position]) -> None:
        self.positions = list(positions)

    def to_payload(self) -> dict[str, Any]:
        return {
            "last_block_height": self.last_block_height,
            "positions": [position.to_payload() for position in self.positions],
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PositionBook":
        return cls(
            positions=[
                Position.from_payload(item) for item in payload.get("positions", [])
            ],
            last_block_height=payload.get("last_block_height"),
        )

    def save(self, path: str | Path) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = self.to_payload()
        target.write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )

    @classmethod
    def load(cls, path: str | Path) -> "PositionBook":
        target = Path(path)
        if not target.exists():
            return cls()
        payload = json.loads(target.read_text(encoding="utf-8"))
        return cls.from_payload(payload)
