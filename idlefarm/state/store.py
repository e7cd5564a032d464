"""Transactional mutation of the simulation state.

Every resource change goes through ``StateStore.update_resource`` which
validates debits before applying them and clamps material additions to the
storage cap currently unlocked. Multi-resource debits (a craft that needs
wood, iron and energy) are wrapped in a transaction so that a shortfall on
any one of them leaves the state exactly as it was.

Usage:
------
    tx = store.begin_transaction()
    try:
        ...
        store.commit(tx)
    except Exception:
        store.rollback(tx)
        raise

    # Or, for the common case of paying a bundle of costs:
    result = store.spend(energy=5, materials={"wood": 10})
    if result.is_err():
        logger.debug(f"Cannot afford: {result.error}")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Dict, List, Mapping, Optional

from idlefarm.enums import ResourceKind, ResourceOperation
from idlefarm.events.domain_events import StorageLimitHitEvent
from idlefarm.events.event_bus import EventBus
from idlefarm.exceptions import TransactionError
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import GameState, Meter

logger = logging.getLogger(__name__)

_KEYED = (ResourceKind.SEEDS, ResourceKind.MATERIALS)


@dataclass(frozen=True)
class ResourceChange:
    """A requested change to one resource.

    Attributes:
        resource: Which pool to change
        operation: add, subtract or set
        amount: Non-negative quantity
        key: Seed or material id (required for seeds and materials)
        reason: Free-form tag for logs
    """

    resource: ResourceKind
    operation: ResourceOperation
    amount: float
    key: Optional[str] = None
    reason: str = ""


@dataclass(frozen=True)
class ResourceUpdate:
    """What ``update_resource`` actually did."""

    resource: ResourceKind
    key: Optional[str]
    before: float
    after: float
    hit_limit: bool = False
    discarded: float = 0

    @property
    def delta(self) -> float:
        return self.after - self.before


@dataclass
class Transaction:
    id: int
    snapshot: GameState
    closed: bool = False


class StateStore:
    """Owns the single mutable ``GameState`` and its transactional API."""

    def __init__(self, state: GameState, event_bus: Optional[EventBus] = None) -> None:
        self._state = state
        self._event_bus = event_bus
        self._transactions: List[Transaction] = []
        self._next_tx_id = 1

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def in_transaction(self) -> bool:
        return bool(self._transactions)

    @property
    def transaction_depth(self) -> int:
        return len(self._transactions)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin_transaction(self) -> Transaction:
        tx = Transaction(id=self._next_tx_id, snapshot=self._state.snapshot())
        self._next_tx_id += 1
        self._transactions.append(tx)
        return tx

    def commit(self, tx: Transaction) -> None:
        self._close(tx)

    def rollback(self, tx: Transaction) -> None:
        """Restore the state captured when ``tx`` began.

        The ``GameState`` object itself is kept (its fields are swapped back),
        so references held by collaborators stay valid.
        """
        self._close(tx)
        for f in fields(GameState):
            setattr(self._state, f.name, getattr(tx.snapshot, f.name))
        logger.debug(f"Rolled back transaction {tx.id}")

    def unwind(self, tx: Transaction) -> None:
        """Roll back ``tx`` together with any transactions still open inside it.

        Used at fault boundaries, where an exception may have escaped before
        inner transactions were closed.
        """
        if not any(open_tx is tx for open_tx in self._transactions):
            raise TransactionError(f"Transaction {tx.id} is not open")
        while self._transactions[-1] is not tx:
            self._transactions.pop().closed = True
        self.rollback(tx)

    def _close(self, tx: Transaction) -> None:
        if tx.closed:
            raise TransactionError(f"Transaction {tx.id} is already closed")
        if not self._transactions or self._transactions[-1] is not tx:
            raise TransactionError(
                f"Transaction {tx.id} is not the innermost open transaction"
            )
        self._transactions.pop()
        tx.closed = True

    # ------------------------------------------------------------------
    # Single-resource updates
    # ------------------------------------------------------------------

    def update_resource(self, change: ResourceChange) -> Result[ResourceUpdate, str]:
        """Apply one resource change.

        Debits that would go negative are refused. Energy and water additions
        clamp to their meter maximum; material additions clamp to the storage
        cap and report the overflow through ``hit_limit``.
        """
        if change.amount < 0:
            return Err(f"Negative amount {change.amount} for {change.resource}")
        if change.resource in _KEYED and not change.key:
            return Err(f"{change.resource} change requires a key")

        resources = self._state.resources
        if change.resource is ResourceKind.ENERGY:
            return self._update_meter(resources.energy, change)
        if change.resource is ResourceKind.WATER:
            return self._update_meter(resources.water, change)
        if change.resource is ResourceKind.GOLD:
            return self._update_gold(change)
        if change.resource is ResourceKind.SEEDS:
            return self._update_counter(resources.seeds, change, cap=None)
        return self._update_counter(
            resources.materials,
            change,
            cap=self._state.progression.storage_limit(change.key),
        )

    def _update_meter(self, meter: Meter, change: ResourceChange) -> Result[ResourceUpdate, str]:
        before = meter.current
        if change.operation is ResourceOperation.SUBTRACT:
            if change.amount > before + 1e-9:
                return Err(f"Not enough {change.resource}: have {before:g}, need {change.amount:g}")
            after = max(0.0, before - change.amount)
        elif change.operation is ResourceOperation.ADD:
            after = before + change.amount
        else:
            after = change.amount

        hit_limit = after > meter.maximum
        discarded = after - meter.maximum if hit_limit else 0
        meter.current = min(after, meter.maximum)
        return Ok(
            ResourceUpdate(change.resource, None, before, meter.current, hit_limit, discarded)
        )

    def _update_gold(self, change: ResourceChange) -> Result[ResourceUpdate, str]:
        resources = self._state.resources
        before = resources.gold
        amount = int(change.amount)
        if change.operation is ResourceOperation.SUBTRACT:
            if amount > before:
                return Err(f"Not enough gold: have {before}, need {amount}")
            resources.gold = before - amount
        elif change.operation is ResourceOperation.ADD:
            resources.gold = before + amount
        else:
            resources.gold = amount
        return Ok(ResourceUpdate(ResourceKind.GOLD, None, before, resources.gold))

    def _update_counter(
        self, pool: Dict[str, int], change: ResourceChange, cap: Optional[int]
    ) -> Result[ResourceUpdate, str]:
        key = change.key
        before = pool.get(key, 0)
        amount = int(change.amount)
        if change.operation is ResourceOperation.SUBTRACT:
            if amount > before:
                return Err(f"Not enough {key}: have {before}, need {amount}")
            pool[key] = before - amount
            return Ok(ResourceUpdate(change.resource, key, before, pool[key]))

        target = before + amount if change.operation is ResourceOperation.ADD else amount
        if cap is None or target <= cap:
            pool[key] = target
            return Ok(ResourceUpdate(change.resource, key, before, target))

        stored = max(before, cap) if change.operation is ResourceOperation.ADD else cap
        discarded = target - stored
        pool[key] = stored
        self._record_waste(key, requested=amount, stored=stored - before, discarded=discarded)
        return Ok(
            ResourceUpdate(change.resource, key, before, stored, hit_limit=True, discarded=discarded)
        )

    def _record_waste(self, material: str, requested: int, stored: int, discarded: int) -> None:
        wasted = self._state.tracking.wasted_materials
        wasted[material] = wasted.get(material, 0) + discarded
        logger.debug(f"Storage cap hit for {material}: discarded {discarded}")
        if self._event_bus is not None:
            self._event_bus.emit(
                StorageLimitHitEvent(
                    material=material,
                    requested=requested,
                    stored=max(0, stored),
                    discarded=discarded,
                )
            )

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    def add(
        self, resource: ResourceKind, amount: float, key: Optional[str] = None, reason: str = ""
    ) -> Result[ResourceUpdate, str]:
        return self.update_resource(
            ResourceChange(resource, ResourceOperation.ADD, amount, key, reason)
        )

    def subtract(
        self, resource: ResourceKind, amount: float, key: Optional[str] = None, reason: str = ""
    ) -> Result[ResourceUpdate, str]:
        return self.update_resource(
            ResourceChange(resource, ResourceOperation.SUBTRACT, amount, key, reason)
        )

    def add_materials(self, materials: Mapping[str, int], reason: str = "") -> Dict[str, ResourceUpdate]:
        """Add several materials, each clamped to its cap."""
        updates = {}
        for material, qty in materials.items():
            if qty <= 0:
                continue
            updates[material] = self.add(ResourceKind.MATERIALS, qty, material, reason).unwrap()
        return updates

    def apply_all(self, changes: List[ResourceChange]) -> Result[List[ResourceUpdate], str]:
        """Apply every change or none of them."""
        tx = self.begin_transaction()
        updates: List[ResourceUpdate] = []
        for change in changes:
            result = self.update_resource(change)
            if result.is_err():
                self.rollback(tx)
                return Err(result.error)
            updates.append(result.unwrap())
        self.commit(tx)
        return Ok(updates)

    def spend(
        self,
        *,
        energy: float = 0,
        gold: int = 0,
        water: float = 0,
        materials: Optional[Mapping[str, int]] = None,
        seeds: Optional[Mapping[str, int]] = None,
        reason: str = "",
    ) -> Result[List[ResourceUpdate], str]:
        """Debit a bundle of costs atomically."""
        sub = ResourceOperation.SUBTRACT
        changes = []
        if energy:
            changes.append(ResourceChange(ResourceKind.ENERGY, sub, energy, reason=reason))
        if gold:
            changes.append(ResourceChange(ResourceKind.GOLD, sub, gold, reason=reason))
        if water:
            changes.append(ResourceChange(ResourceKind.WATER, sub, water, reason=reason))
        for material, qty in (materials or {}).items():
            if qty:
                changes.append(ResourceChange(ResourceKind.MATERIALS, sub, qty, material, reason))
        for seed, qty in (seeds or {}).items():
            if qty:
                changes.append(ResourceChange(ResourceKind.SEEDS, sub, qty, seed, reason))
        return self.apply_all(changes)

    def consume_materials(
        self, materials: Mapping[str, int], reason: str = ""
    ) -> Result[List[ResourceUpdate], str]:
        return self.spend(materials=materials, reason=reason)

    def can_afford(
        self,
        *,
        energy: float = 0,
        gold: int = 0,
        water: float = 0,
        materials: Optional[Mapping[str, int]] = None,
    ) -> bool:
        resources = self._state.resources
        if energy > resources.energy.current + 1e-9:
            return False
        if gold > resources.gold:
            return False
        if water > resources.water.current + 1e-9:
            return False
        return all(resources.materials.get(m, 0) >= q for m, q in (materials or {}).items())

    def __repr__(self) -> str:
        return f"StateStore(depth={len(self._transactions)})"
