"""Live state reconciliation.

Merges asynchronous push updates from the simulation backend into the
topology model. Each update touches only its own fields (queue size, or
machine status and color), so a concurrent local move of the same node never
conflicts with it. The last update applied for a field wins.

Push updates carry no sequence number, so a reordered or duplicated message
can overwrite a fresher value with a stale one. This is accepted: the next
update for the same node corrects it, and a full reload resynchronizes
everything.

Updates for ids that match no node are dropped. That happens routinely for
a short while after a node is deleted locally and is not an error.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from lineflow.core.config import settings
from lineflow.core.logging import get_logger
from lineflow.models.enums import MachineStatus
from lineflow.models.topology import MachineNode, QueueNode
from lineflow.schemas.updates import MachineUpdate, PushUpdate, QueueUpdate
from lineflow.services.topology.exceptions import ContractViolationError

if TYPE_CHECKING:
    from lineflow.services.topology.geometry import ConnectionGeometryResolver
    from lineflow.services.topology.model import Topology

logger = get_logger(__name__)

UpdateListener = Callable[[str], None]


def parse_push_update(payload: Mapping[str, Any]) -> PushUpdate:
    """Decode a raw push message into a queue or machine update.

    The shape is chosen by which id key the message carries.

    Raises:
        ContractViolationError: If the payload is None, has neither id key,
            or fails schema validation.
    """
    if payload is None:
        raise ContractViolationError("push update")

    schema: type[QueueUpdate] | type[MachineUpdate]
    if "queueId" in payload or "queue_id" in payload:
        schema = QueueUpdate
    elif "machineId" in payload or "machine_id" in payload:
        schema = MachineUpdate
    else:
        raise ContractViolationError("push update", "has neither queueId nor machineId")

    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise ContractViolationError(schema.__name__, str(e)) from e


def _coerce(update: Any, schema: type[QueueUpdate] | type[MachineUpdate]) -> Any:
    if update is None:
        raise ContractViolationError(schema.__name__)
    if isinstance(update, schema):
        return update
    try:
        return schema.model_validate(update)
    except ValidationError as e:
        raise ContractViolationError(schema.__name__, str(e)) from e


class LiveStateReconciler:
    """Applies push updates to a topology.

    Both apply methods are idempotent and return the id of the node they
    changed, or None when the update was dropped.

    Machine updates are matched on the machine id first. When
    ``name_fallback`` is enabled, an update addressed by the machine's
    display name is accepted as well; some backend code paths still send
    names.
    """

    def __init__(self, topology: Topology, name_fallback: bool | None = None) -> None:
        self.topology = topology
        self.name_fallback = (
            settings.MACHINE_NAME_FALLBACK if name_fallback is None else name_fallback
        )

    def apply(self, update: PushUpdate) -> str | None:
        """Dispatch an already-decoded update to the matching apply method."""
        if isinstance(update, QueueUpdate):
            return self.apply_queue_update(update)
        if isinstance(update, MachineUpdate):
            return self.apply_machine_update(update)
        raise ContractViolationError("update", f"has unsupported type {type(update).__name__}")

    def apply_queue_update(self, update: QueueUpdate | Mapping[str, Any]) -> str | None:
        """Set a queue's size.

        Only the size is known afterwards; the held item list becomes
        unknown rather than being made up.

        Raises:
            ContractViolationError: If the update is None or malformed.
        """
        update = _coerce(update, QueueUpdate)

        node = self.topology.get_node(update.queue_id)
        if not isinstance(node, QueueNode):
            logger.debug(
                f"Dropped update for unknown queue {update.queue_id}",
                extra={"context": {"queue_id": update.queue_id}},
            )
            return None

        node.set_size(update.current_size)
        node.dirty = True
        return node.id

    def apply_machine_update(self, update: MachineUpdate | Mapping[str, Any]) -> str | None:
        """Set a machine's status and display color.

        The color becomes the product color when one is given and falls
        back to the machine's default color otherwise.

        Raises:
            ContractViolationError: If the update is None or malformed.
        """
        update = _coerce(update, MachineUpdate)

        node = self._resolve_machine(update.machine_id)
        if node is None:
            logger.debug(
                f"Dropped update for unknown machine {update.machine_id}",
                extra={"context": {"machine_id": update.machine_id}},
            )
            return None

        node.status = MachineStatus(update.status)
        node.color = update.product_color or node.default_color
        node.dirty = True
        return node.id

    def _resolve_machine(self, identifier: str) -> MachineNode | None:
        node = self.topology.get_node(identifier)
        if isinstance(node, MachineNode):
            return node
        if not self.name_fallback:
            return None

        node = self.topology.find_machine_by_name(identifier)
        if node is not None:
            logger.debug(
                f"Matched machine update by name {identifier} -> {node.id}",
                extra={"context": {"name": identifier, "machine_id": node.id}},
            )
        return node


class ReconciliationLoop:
    """Single consumer of a bounded push-update channel.

    Producers (the push transport) call ``publish``; ``run`` drains the
    channel on one task, so every node has exactly one writer. After each
    applied update the touched node's connections are re-resolved and
    listeners are told which node changed.

    Example:
        >>> loop = ReconciliationLoop(LiveStateReconciler(topology), resolver)
        >>> task = asyncio.create_task(loop.run())
        >>> await loop.publish({"queueId": "Q1", "currentSize": 3})
        >>> await loop.stop()
        >>> await task
    """

    def __init__(
        self,
        reconciler: LiveStateReconciler,
        resolver: ConnectionGeometryResolver | None = None,
        maxsize: int | None = None,
    ) -> None:
        self.reconciler = reconciler
        self.resolver = resolver
        self._queue: asyncio.Queue[PushUpdate | None] = asyncio.Queue(
            maxsize=settings.PUSH_QUEUE_MAXSIZE if maxsize is None else maxsize
        )
        self._listeners: list[UpdateListener] = []
        self._running = False
        self.applied_count = 0
        self.dropped_count = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def subscribe(self, listener: UpdateListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it.

        A listener that raises is logged and does not stop the loop.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, update: PushUpdate | Mapping[str, Any]) -> None:
        """Enqueue an update, waiting while the channel is full.

        Raw mappings are decoded first, so malformed messages fail here,
        in the producer.
        """
        await self._queue.put(self._decode(update))

    def publish_nowait(self, update: PushUpdate | Mapping[str, Any]) -> None:
        """Enqueue without waiting.

        Raises:
            asyncio.QueueFull: If the channel is at capacity.
        """
        self._queue.put_nowait(self._decode(update))

    async def stop(self) -> None:
        """Ask ``run`` to return once the updates queued so far are applied."""
        await self._queue.put(None)

    async def join(self) -> None:
        """Wait until every queued update has been processed."""
        await self._queue.join()

    async def run(self) -> None:
        """Consume updates until ``stop`` is called."""
        if self._running:
            raise RuntimeError("ReconciliationLoop is already running")
        self._running = True
        logger.info("Reconciliation loop started")
        try:
            while True:
                update = await self._queue.get()
                try:
                    if update is None:
                        break
                    self.process(update)
                finally:
                    self._queue.task_done()
        finally:
            self._running = False
            logger.info(
                "Reconciliation loop stopped",
                extra={
                    "context": {
                        "applied": self.applied_count,
                        "dropped": self.dropped_count,
                    }
                },
            )

    def process(self, update: PushUpdate) -> str | None:
        """Apply one update and propagate its effects."""
        node_id = self.reconciler.apply(update)
        if node_id is None:
            self.dropped_count += 1
            return None

        self.applied_count += 1
        if self.resolver is not None:
            self.resolver.recompute_for_node(self.reconciler.topology, node_id)
        for listener in list(self._listeners):
            try:
                listener(node_id)
            except Exception:
                logger.exception(
                    f"Update listener failed for node {node_id}",
                    extra={"context": {"node_id": node_id, "listener": repr(listener)}},
                )
        return node_id

    @staticmethod
    def _decode(update: PushUpdate | Mapping[str, Any]) -> PushUpdate:
        if isinstance(update, QueueUpdate | MachineUpdate):
            return update
        return parse_push_update(update)


__all__ = [
    "LiveStateReconciler",
    "ReconciliationLoop",
    "UpdateListener",
    "parse_push_update",
]
