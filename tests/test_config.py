"""Tests for run configuration compilation."""

import pytest
from pydantic import ValidationError

from idlefarm.config.parameters import (
    PERSONA_PRESETS,
    CompiledConfig,
    PersonaTraits,
    SimulationParameters,
    compile_config,
)
from idlefarm.exceptions import ConfigurationError


class TestCompileConfig:
    def test_defaults(self) -> None:
        config = compile_config()
        assert config.persona.strategy == "casual"
        assert config.parameters.decisions.top_k == 3
        assert config.parameters.checkin.night_start_hour == 22
        assert config.seed is None

    def test_overrides_apply_to_parameters_and_persona(self) -> None:
        config = compile_config(
            "speedrunner",
            overrides={"decisions.top_k": 5, "persona.efficiency": 0.5, "victory.plots": 40},
            seed=7,
        )
        assert config.persona.strategy == "speedrunner"
        assert config.persona.efficiency == 0.5
        assert config.parameters.decisions.top_k == 5
        assert config.parameters.victory.plots == 40
        assert config.seed == 7

    def test_overrides_do_not_leak_into_presets(self) -> None:
        compile_config("casual", overrides={"persona.efficiency": 0.1})
        assert PERSONA_PRESETS["casual"].efficiency == 0.7

    def test_unknown_path_fails_fast(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown parameter path"):
            compile_config(overrides={"decisions.top_kk": 5})

    def test_path_through_a_leaf_fails(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_config(overrides={"decisions.top_k.value": 5})

    def test_out_of_range_value_fails(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            compile_config(overrides={"decisions.top_k": 0})

    def test_persona_has_no_session_schedule(self) -> None:
        """Check-in cadence belongs to the persona strategy, not to trait fields."""
        with pytest.raises(ConfigurationError, match="Unknown parameter path"):
            compile_config(overrides={"persona.weekday_checkins": 3})
        assert set(PersonaTraits.model_fields) == {
            "id",
            "name",
            "strategy",
            "efficiency",
            "risk_tolerance",
            "optimization",
            "learning_rate",
        }

    def test_unknown_persona_fails(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown persona"):
            compile_config("professional")

    def test_explicit_traits_accepted(self) -> None:
        traits = PersonaTraits(id="custom", name="Custom", efficiency=1.0)
        config = compile_config(traits)
        assert config.persona.id == "custom"
        assert config.persona.efficiency == 1.0

    @pytest.mark.parametrize("persona", sorted(PERSONA_PRESETS))
    def test_every_preset_compiles(self, persona: str) -> None:
        assert isinstance(compile_config(persona), CompiledConfig)


class TestModels:
    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            PersonaTraits(favourite_crop="carrot")

    def test_assignment_is_validated(self) -> None:
        params = SimulationParameters()
        with pytest.raises(ValidationError):
            params.decisions.top_k = 99

    def test_catching_skill_range(self) -> None:
        assert PersonaTraits(optimization=0.0).catching_skill == pytest.approx(0.7)
        assert PersonaTraits(optimization=1.0).catching_skill == pytest.approx(0.95)
        assert PERSONA_PRESETS["casual"].catching_skill == pytest.approx(0.85)

    def test_starting_state_defaults(self) -> None:
        start = SimulationParameters().start
        assert (start.plots, start.gold, start.energy, start.water) == (3, 75, 3, 0)
        assert start.seeds == {"carrot": 1, "radish": 1}
