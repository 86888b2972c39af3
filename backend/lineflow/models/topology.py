"""In-memory production line entities.

Queues and machines are the two node kinds; connections are directed edges
between them. These are plain mutable records: the topology model owns them
and the reconciler patches their fields in place.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass, field
from typing import Any, ClassVar

from lineflow.models.enums import MachineStatus, NodeKind

DEFAULT_MACHINE_COLOR = "#3b82f6"

ConnectionKey = str | tuple[str, str]


@dataclass(frozen=True)
class Item:
    """A product held by a queue."""

    id: str
    color: str


@dataclass
class Node:
    """Base node placed on the canvas.

    ``id`` cannot be reassigned once set and ``kind`` is fixed by the
    subclass.
    """

    kind: ClassVar[NodeKind]

    id: str
    x: float = 0.0
    y: float = 0.0
    dirty: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "kind" or (name == "id" and "id" in self.__dict__):
            raise FrozenInstanceError(f"cannot assign to field {name!r}")
        super().__setattr__(name, value)

    @property
    def label(self) -> str:
        """Identifier shown in validation messages."""
        return self.id

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y
        self.dirty = True


@dataclass
class QueueNode(Node):
    """Buffer holding items between machines.

    ``items`` is None when only the size is known.
    """

    kind: ClassVar[NodeKind] = NodeKind.QUEUE

    size: int = 0
    capacity: int | None = None
    items: list[Item] | None = None

    def __post_init__(self) -> None:
        if self.items is not None and self.size != len(self.items):
            raise ValueError(
                f"Queue {self.id!r} size {self.size} does not match "
                f"{len(self.items)} held items"
            )

    @property
    def held_items(self) -> list[Item]:
        return list(self.items) if self.items is not None else []

    def set_items(self, items: list[Item]) -> None:
        """Replace the held items, keeping ``size`` in step."""
        self.items = list(items)
        self.size = len(self.items)

    def set_size(self, size: int) -> None:
        """Record a bare size; the item list becomes unknown."""
        self.size = size
        self.items = None


@dataclass
class MachineNode(Node):
    """Processing station.

    ``name`` is the human-readable identifier some backend code paths use
    instead of ``id``.
    """

    kind: ClassVar[NodeKind] = NodeKind.MACHINE

    name: str | None = None
    status: MachineStatus = MachineStatus.IDLE
    service_time_ms: int = 1000
    color: str = DEFAULT_MACHINE_COLOR
    default_color: str = DEFAULT_MACHINE_COLOR
    ready: bool = True

    @property
    def label(self) -> str:
        """Display name when one is set, otherwise the id."""
        return self.name or self.id


@dataclass
class Connection:
    """Directed edge between two nodes.

    The ``from_*``/``to_*`` coordinates are a geometry cache recomputed from
    node positions. Animation fields are presentational only.
    """

    from_id: str
    to_id: str
    id: str | None = None
    from_x: float | None = None
    from_y: float | None = None
    to_x: float | None = None
    to_y: float | None = None
    animating: bool = False
    anim_x: float | None = None
    anim_y: float | None = None
    product_color: str | None = None

    @property
    def key(self) -> ConnectionKey:
        """Backend id when assigned, otherwise the ordered endpoint pair."""
        return self.id if self.id is not None else (self.from_id, self.to_id)

    @property
    def has_geometry(self) -> bool:
        return None not in (self.from_x, self.from_y, self.to_x, self.to_y)

    def touches(self, node_id: str) -> bool:
        return node_id in (self.from_id, self.to_id)


__all__ = [
    "DEFAULT_MACHINE_COLOR",
    "Connection",
    "ConnectionKey",
    "Item",
    "MachineNode",
    "Node",
    "QueueNode",
]
