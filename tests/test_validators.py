from offworklock.config import EngineConfig, ForcedExitConfig
from offworklock.domain.rewards import RewardDefinition
from offworklock.validators import validate_config


def test_default_config_is_valid():
    assert validate_config(EngineConfig()) == []


def test_validate_config_reports_problems():
    config = EngineConfig(
        roll_cost=-1,
        action_values={"minecraft:stone": 0},
        rewards=(
            RewardDefinition("A", "A", weight=-1, effects=("add_points:many", "teleport:spawn")),
            RewardDefinition("A", "Again", weight=0, effects=("custom:ok",)),
        ),
        forced_exit=ForcedExitConfig(warning_message="No placeholder"),
    )
    errors = validate_config(config)
    assert "Roll cost cannot be negative, got '-1'." in errors
    assert "Action value for 'minecraft:stone' must be positive; it is ignored otherwise." in errors
    assert "Reward id 'A' defined multiple times." in errors
    assert "Reward 'A' has negative weight '-1'." in errors
    assert "Reward 'A' effect 'add_points:many' has non-integer amount 'many'." in errors
    assert "Reward 'A' effect 'teleport:spawn' has unknown keyword 'teleport'." in errors
    assert "No reward has a positive weight; every roll will fail." in errors
    assert "Forced exit warning message should contain the '{count}' placeholder." in errors
    assert not any("custom:ok" in error for error in errors)


def test_empty_reward_table_is_reported():
    assert validate_config(EngineConfig(rewards=())) == ["Reward table is empty; every roll will fail."]
