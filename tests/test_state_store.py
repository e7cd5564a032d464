"""Tests for StateStore resource updates and transactions."""

import pytest

from idlefarm.enums import ResourceKind, ResourceOperation
from idlefarm.events.domain_events import StorageLimitHitEvent
from idlefarm.exceptions import TransactionError
from idlefarm.state.store import ResourceChange


class TestResourceUpdates:
    def test_energy_clamps_to_maximum(self, store) -> None:
        update = store.add(ResourceKind.ENERGY, 500).unwrap()
        assert store.state.resources.energy.current == 100
        assert update.hit_limit
        assert update.discarded == pytest.approx(403)

    def test_debit_below_zero_refused(self, store) -> None:
        result = store.subtract(ResourceKind.ENERGY, 10)
        assert result.is_err()
        assert "Not enough energy" in result.error
        assert store.state.resources.energy.current == 3

    def test_gold_debit(self, store) -> None:
        assert store.subtract(ResourceKind.GOLD, 25).is_ok()
        assert store.state.resources.gold == 50
        assert store.subtract(ResourceKind.GOLD, 51).is_err()
        assert store.state.resources.gold == 50

    def test_set_operation(self, store) -> None:
        store.update_resource(ResourceChange(ResourceKind.WATER, ResourceOperation.SET, 12))
        assert store.state.resources.water.current == 12

    def test_negative_amount_rejected(self, store) -> None:
        assert store.add(ResourceKind.GOLD, -5).is_err()

    def test_keyed_resources_need_a_key(self, store) -> None:
        result = store.add(ResourceKind.SEEDS, 1)
        assert result.is_err()
        assert "requires a key" in result.error

    def test_seeds_are_uncapped(self, store) -> None:
        store.add(ResourceKind.SEEDS, 5000, "carrot")
        assert store.state.resources.seeds["carrot"] == 5001


class TestStorageLimits:
    def test_overflow_is_discarded_and_reported(self, store, event_bus) -> None:
        hits: list = []
        event_bus.subscribe(StorageLimitHitEvent, hits.append)

        update = store.add(ResourceKind.MATERIALS, 60, "wood").unwrap()

        assert store.state.resources.materials["wood"] == 50
        assert update.hit_limit
        assert update.discarded == 10
        assert store.state.tracking.wasted_materials == {"wood": 10}
        assert hits == [StorageLimitHitEvent(material="wood", requested=60, stored=50, discarded=10)]

    def test_storage_upgrade_raises_cap(self, store) -> None:
        store.state.progression.unlocked_upgrades.append("material_crate_i")
        store.add(ResourceKind.MATERIALS, 80, "wood")
        assert store.state.resources.materials["wood"] == 80

    def test_boss_materials_are_not_capped(self, store) -> None:
        update = store.add(ResourceKind.MATERIALS, 5000, "enchanted_wood").unwrap()
        assert not update.hit_limit
        assert store.state.resources.materials["enchanted_wood"] == 5000

    def test_add_materials_skips_zero_quantities(self, store) -> None:
        updates = store.add_materials({"wood": 5, "iron": 0})
        assert set(updates) == {"wood"}
        assert store.state.resources.materials["iron"] == 0


class TestSpend:
    def test_spend_is_atomic(self, store) -> None:
        """A shortfall on one cost leaves every other resource untouched."""
        result = store.spend(gold=10, materials={"stone": 5, "wood": 1})
        assert result.is_err()
        assert store.state.resources.gold == 75
        assert store.state.resources.materials["stone"] == 5
        assert not store.in_transaction

    def test_spend_success(self, store) -> None:
        updates = store.spend(energy=2, gold=10, materials={"stone": 5}).unwrap()
        assert len(updates) == 3
        resources = store.state.resources
        assert resources.energy.current == 1
        assert resources.gold == 65
        assert resources.materials["stone"] == 0

    def test_can_afford(self, store) -> None:
        assert store.can_afford(gold=75, materials={"stone": 5})
        assert not store.can_afford(energy=4)
        assert not store.can_afford(materials={"wood": 1})


class TestTransactions:
    def test_rollback_restores_state_and_keeps_identity(self, store) -> None:
        state = store.state
        tx = store.begin_transaction()
        store.add(ResourceKind.GOLD, 100)
        state.progression.built_structures.add("tower_reach_1")

        store.rollback(tx)

        assert store.state is state
        assert state.resources.gold == 75
        assert state.progression.built_structures == {"farm"}

    def test_commit_keeps_changes(self, store) -> None:
        tx = store.begin_transaction()
        store.add(ResourceKind.GOLD, 5)
        store.commit(tx)
        assert store.state.resources.gold == 80
        assert store.transaction_depth == 0

    def test_nested_transactions(self, store) -> None:
        outer = store.begin_transaction()
        store.add(ResourceKind.GOLD, 5)
        inner = store.begin_transaction()
        store.add(ResourceKind.GOLD, 5)
        store.rollback(inner)
        assert store.state.resources.gold == 80
        store.rollback(outer)
        assert store.state.resources.gold == 75

    def test_closing_twice_fails(self, store) -> None:
        tx = store.begin_transaction()
        store.commit(tx)
        with pytest.raises(TransactionError, match="already closed"):
            store.commit(tx)

    def test_out_of_order_close_fails(self, store) -> None:
        outer = store.begin_transaction()
        inner = store.begin_transaction()
        with pytest.raises(TransactionError, match="innermost"):
            store.commit(outer)
        store.rollback(inner)
        store.rollback(outer)

    def test_unwind_closes_inner_transactions(self, store) -> None:
        outer = store.begin_transaction()
        store.add(ResourceKind.GOLD, 5)
        inner = store.begin_transaction()
        store.add(ResourceKind.GOLD, 5)

        store.unwind(outer)

        assert inner.closed and outer.closed
        assert not store.in_transaction
        assert store.state.resources.gold == 75

    def test_unwind_of_closed_transaction_fails(self, store) -> None:
        tx = store.begin_transaction()
        store.commit(tx)
        with pytest.raises(TransactionError, match="not open"):
            store.unwind(tx)
