import unittest

import orjson

from idlefarm.config.parameters import compile_config
from idlefarm.enums import HelperRole, Importance, ScreenId, WeaponFamily
from idlefarm.events.domain_events import GameEvent
from idlefarm.serializers import (
    event_to_dict,
    state_to_dict,
    summary_to_dict,
    tick_result_to_dict,
    to_json,
)
from idlefarm.simulation.engine import create_engine
from idlefarm.state.model import BlueprintRecord, Gnome, create_initial_state


class TestStateSerializer(unittest.TestCase):
    def setUp(self):
        self.state = create_initial_state(compile_config("casual", seed=1))

    def test_initial_state(self):
        data = state_to_dict(self.state)

        self.assertEqual(data["clock"]["total_minutes"], 480)
        self.assertEqual(data["resources"]["gold"], 75)
        self.assertEqual(data["resources"]["seeds"], {"carrot": 1, "radish": 1})
        # Empty materials are left out
        self.assertEqual(data["resources"]["materials"], {"stone": 5})
        self.assertEqual(data["progression"]["unlocked_screens"], ["adventure", "farm", "town"])
        self.assertEqual(data["progression"]["phase"], self.state.progression.phase.value)
        self.assertEqual(data["location"]["screen"], "farm")
        self.assertEqual(data["helpers"], [])

    def test_enums_and_sets_become_plain_values(self):
        self.state.inventory.weapons[WeaponFamily.SPEAR] = 2
        self.state.inventory.blueprints["blueprint_forge"] = BlueprintRecord(purchased=True)
        self.state.progression.built_structures.add("tower_reach_1")
        self.state.helpers.gnomes["gnome_pip"] = Gnome("gnome_pip", "Pip", HelperRole.SOWER)

        data = state_to_dict(self.state)

        self.assertEqual(data["inventory"]["weapons"], {"spear": 2})
        self.assertEqual(data["inventory"]["blueprints"], {"blueprint_forge": {"purchased": True, "built": False}})
        self.assertEqual(data["progression"]["built_structures"], ["farm", "tower_reach_1"])
        self.assertEqual(data["helpers"][0]["role"], "sower")
        self.assertIn("tower", data["progression"]["unlocked_screens"])

    def test_state_is_json_serializable(self):
        decoded = orjson.loads(to_json(state_to_dict(self.state)))
        self.assertEqual(decoded["progression"]["farm_plots"], 3)


class TestEventSerializer(unittest.TestCase):
    def test_event_to_dict(self):
        event = GameEvent(490, "screen_unlocked", "Unlocked the tower", Importance.HIGH, {"screen": ScreenId.TOWER})
        self.assertEqual(
            event_to_dict(event),
            {
                "timestamp": 490,
                "type": "screen_unlocked",
                "description": "Unlocked the tower",
                "importance": "high",
                "data": {"screen": "tower"},
            },
        )


class TestRunSerializers(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine(compile_config("casual", seed=3))

    def test_tick_result(self):
        data = tick_result_to_dict(self.engine.tick())
        self.assertEqual(data["delta_time"], 1.0)
        self.assertEqual(data["executed_actions"][0], "move to town")
        self.assertEqual(data["state"]["location"]["screen"], "town")
        self.assertFalse(data["is_complete"])

    def test_summary(self):
        data = summary_to_dict(self.engine.run(5))
        self.assertEqual(data["ticks"], 5)
        self.assertEqual(data["run_id"], self.engine.run_id)
        self.assertEqual(data["final_state"]["clock"]["total_minutes"], 485)
        self.assertEqual(list(data["event_counts"]), sorted(data["event_counts"]))

    def test_pretty_json(self):
        data = summary_to_dict(self.engine.run(2))
        pretty = to_json(data, pretty=True)
        self.assertIn(b"\n  ", pretty)
        self.assertEqual(orjson.loads(pretty), orjson.loads(to_json(data)))


if __name__ == "__main__":
    unittest.main()
