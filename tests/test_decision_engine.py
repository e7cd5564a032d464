"""Tests for candidate enumeration, filtering and ranking."""

import random

import pytest

from idlefarm.data.provider import InMemoryDataProvider
from idlefarm.decision.actions import GameAction
from idlefarm.decision.engine import DecisionEngine
from idlefarm.decision.enumerators import (
    EnumerationContext,
    adventure_actions,
    emergency_actions,
    farm_actions,
    next_role,
    town_actions,
)
from idlefarm.decision.filters import ActionFilter
from idlefarm.decision.prerequisites import is_met, unmet
from idlefarm.enums import ActionKind, HelperRole, RouteLength, ScreenId, WeaponFamily
from idlefarm.state.model import BlueprintRecord, Gnome


@pytest.fixture
def decision_engine(config):
    return DecisionEngine(config.persona, random.Random(42))


@pytest.fixture
def action_filter(data_provider, params):
    return ActionFilter(data_provider, params)


@pytest.fixture
def ctx(state, data_provider, params, config):
    return EnumerationContext(state, data_provider, params, config.persona)


class TestEnumerators:
    def test_farm_candidates_at_start(self, ctx) -> None:
        actions = farm_actions(ctx)
        assert [a.kind for a in actions] == [ActionKind.PLANT, ActionKind.PLANT, ActionKind.PUMP]
        assert [(a.target, a.params["seed"]) for a in actions[:2]] == [
            ("plot_1", "carrot"),
            ("plot_2", "radish"),
        ]

    def test_seed_emergency_heads_to_town(self, ctx) -> None:
        emergencies = emergency_actions(ctx)
        assert emergencies[0].kind is ActionKind.MOVE
        assert emergencies[0].target == "town"
        assert emergencies[0].is_emergency
        # The empty tank is an emergency of its own
        assert [a.kind for a in emergencies[1:]] == [ActionKind.PUMP]

    def test_seed_emergency_buys_blueprint_in_town(self, ctx, state) -> None:
        state.location.current_screen = ScreenId.TOWN
        (emergency,) = emergency_actions(ctx)
        assert emergency.kind is ActionKind.PURCHASE
        assert emergency.target == "blueprint_tower_reach_1"

    def test_seed_emergency_builds_tower_on_farm(self, ctx, state) -> None:
        state.inventory.blueprints["blueprint_tower_reach_1"] = BlueprintRecord(purchased=True)
        emergency = emergency_actions(ctx)[0]
        assert emergency.kind is ActionKind.BUILD
        assert emergency.params["structure"] == "tower_reach_1"

    def test_seed_emergency_with_tower(self, ctx, state) -> None:
        state.progression.built_structures.add("tower_reach_1")
        move = emergency_actions(ctx)[0]
        assert move.target == "tower"

        state.location.current_screen = ScreenId.TOWER
        (catch,) = emergency_actions(ctx)
        assert catch.kind is ActionKind.CATCH_SEEDS
        assert catch.params["duration"] == 5

    def test_town_lists_blueprints_and_upgrades(self, ctx) -> None:
        targets = {a.target for a in town_actions(ctx)}
        assert {"blueprint_tower_reach_1", "blueprint_forge", "hoe", "spear_1"} <= targets

    def test_adventure_variants(self, ctx) -> None:
        meadow = [a for a in adventure_actions(ctx) if a.target == "meadow_path"]
        assert [a.params["length"] for a in meadow] == list(RouteLength)
        rescues = [a for a in adventure_actions(ctx) if a.kind is ActionKind.RESCUE_HELPER]
        assert len(rescues) == 5

    def test_next_role_follows_priority(self, state) -> None:
        assert next_role(state) is HelperRole.WATERER
        state.helpers.gnomes["gnome_pip"] = Gnome("gnome_pip", "Pip", HelperRole.WATERER, assigned=True)
        assert next_role(state) is HelperRole.HARVESTER


class TestActionFilter:
    def test_locked_destination(self, action_filter, state) -> None:
        move = GameAction(ActionKind.MOVE, ScreenId.FARM, "tower")
        assert action_filter.rejection_reason(move, state) == "destination tower is locked"

    def test_already_there(self, action_filter, state) -> None:
        move = GameAction(ActionKind.MOVE, ScreenId.TOWN, "farm")
        assert action_filter.rejection_reason(move, state) == "already there"

    def test_locked_screen(self, action_filter, state) -> None:
        stoke = GameAction(ActionKind.STOKE, ScreenId.FORGE)
        assert action_filter.rejection_reason(stoke, state) == "screen forge is locked"

    def test_unmet_prerequisites(self, action_filter, state) -> None:
        purchase = GameAction(
            ActionKind.PURCHASE, ScreenId.TOWN, "blueprint_forge", prerequisites=("tower_reach_1",)
        )
        assert action_filter.rejection_reason(purchase, state) == "unmet prerequisites ['tower_reach_1']"

    def test_resources(self, action_filter, state) -> None:
        adventure = GameAction(ActionKind.ADVENTURE, ScreenId.ADVENTURE, "meadow_path", energy_cost=10)
        assert action_filter.rejection_reason(adventure, state) == "needs 10 energy"
        pricey = GameAction(ActionKind.PURCHASE, ScreenId.TOWN, "reservoir", gold_cost=1000)
        assert action_filter.rejection_reason(pricey, state) == "needs 1000 gold"

    def test_build_needs_blueprint(self, action_filter, state) -> None:
        build = GameAction(ActionKind.BUILD, ScreenId.FARM, "blueprint_tower_reach_1")
        assert action_filter.rejection_reason(build, state) == "blueprint not purchased"

    def test_adventure_needs_weapon_and_level(self, action_filter, state) -> None:
        state.resources.energy.current = 100
        adventure = GameAction(ActionKind.ADVENTURE, ScreenId.ADVENTURE, "pine_vale", energy_cost=15)
        assert action_filter.rejection_reason(adventure, state) == "no weapon"
        state.inventory.weapons[WeaponFamily.SPEAR] = 1
        assert action_filter.rejection_reason(adventure, state) == "hero level too low"

    def test_cleanup_keeps_energy_reserve(self, action_filter, state) -> None:
        state.resources.energy.current = 9
        weeds = GameAction(ActionKind.CLEANUP, ScreenId.FARM, "clear_weeds_1", energy_cost=5)
        assert action_filter.rejection_reason(weeds, state) == "would dip into the energy reserve"
        assert action_filter.is_valid(weeds.as_emergency("test"), state)


class TestPrerequisites:
    def test_threshold_ids(self, state) -> None:
        assert is_met("plots_3", state)
        assert not is_met("plots_4", state)
        assert is_met("hero_level_1", state)
        assert is_met("farm_stage_1", state)

    def test_facts(self, state) -> None:
        assert is_met("farm", state)
        assert not is_met("forge", state)
        state.progression.completed_adventures.add("meadow_path")
        assert is_met("meadow_path", state)
        assert unmet(["meadow_path", "pine_vale"], state) == ["pine_vale"]


class TestDecisionEngine:
    def test_initial_decision_is_the_seed_emergency(self, decision_engine, state, params, data_provider) -> None:
        actions = decision_engine.evaluate(state, params, data_provider)
        assert 1 <= len(actions) <= params.decisions.top_k
        assert actions[0].is_emergency
        assert actions[0].kind is ActionKind.MOVE
        assert actions[0].target == "town"

    def test_scored_actions_are_sorted(self, decision_engine, state, params, data_provider) -> None:
        state.resources.seeds["carrot"] = 10
        actions = decision_engine.evaluate(state, params, data_provider)
        scores = [a.score for a in actions if not a.is_emergency]
        assert scores == sorted(scores, reverse=True)

    def test_local_actions_and_moves_only(self, decision_engine, state, params, data_provider) -> None:
        state.resources.seeds["carrot"] = 10
        for action in decision_engine.evaluate(state, params, data_provider):
            assert action.screen is ScreenId.FARM

    def test_empty_world_has_nothing_to_do(self, decision_engine, state, params) -> None:
        empty = InMemoryDataProvider([])
        state.resources.seeds.clear()
        state.resources.water.current = state.resources.water.maximum

        assert decision_engine.evaluate(state, params, empty) == []
        explanation = decision_engine.explain(state, params, empty)
        assert explanation.best is None
        assert explanation.reasoning == ("nothing to do",)

    def test_explain_matches_ranking(self, decision_engine, state, params, data_provider) -> None:
        explanation = decision_engine.explain(state, params, data_provider)
        assert explanation.best.target == "town"
        assert explanation.reasoning[0].startswith("emergency:")
        assert len(explanation.alternatives) == len(explanation.reasoning) - 1

    def test_explain_without_rng_is_repeatable(self, decision_engine, state, params, data_provider) -> None:
        first = decision_engine.explain(state, params, data_provider)
        second = decision_engine.explain(state, params, data_provider)
        assert first.reasoning == second.reasoning

    def test_top_k_respected(self, config, state, data_provider) -> None:
        params = config.parameters.model_copy(deep=True)
        params.decisions.top_k = 1
        engine = DecisionEngine(config.persona, random.Random(1))
        assert len(engine.evaluate(state, params, data_provider)) == 1
