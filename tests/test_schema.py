"""Test the defaults registry and schema extraction."""

import pytest

from strata.atom import Atom
from strata.core.errors import ConfigurationError
from strata.schema import DefaultsRegistry, RegistrationState


@pytest.fixture
def defaults():
    return DefaultsRegistry()


class TestRegistration:
    """register / state machine."""

    def test_register_existing_file(self, defaults, defaults_yml):
        path = defaults.register("app", defaults_yml)

        assert path == defaults_yml
        assert defaults.is_registered("app")
        assert defaults.path_for("app") == defaults_yml
        assert defaults.state("app") is RegistrationState.REGISTERED

    def test_register_missing_file_raises_and_stays_unregistered(self, defaults, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            defaults.register("app", tmp_path / "nope.yml")

        assert "Defaults file not found" in str(exc_info.value)
        assert exc_info.value.code == "defaults_not_found"
        assert not defaults.is_registered("app")
        assert defaults.state("app") is RegistrationState.UNREGISTERED

    def test_register_is_idempotent(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)
        defaults.schema("app")

        defaults.register("app", defaults_yml)

        assert defaults.state("app") is RegistrationState.SCHEMA_LOADED

    def test_states_only_move_forward(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)
        defaults.schema("app")
        defaults.mark_declared("app")

        defaults.schema("app")

        assert defaults.state("app") is RegistrationState.ATTRIBUTES_DECLARED

    def test_mark_declared_requires_registration(self, defaults):
        with pytest.raises(ConfigurationError):
            defaults.mark_declared("app")

    def test_reregister_other_path_drops_schema(self, defaults, defaults_yml, write_yaml):
        other = write_yaml("other.yml", "defaults:\n  only: 1\n")
        defaults.register("app", defaults_yml)
        defaults.schema("app")

        defaults.register("app", other)

        assert defaults.schema("app") == {"only": 1}

    def test_reset(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)

        defaults.reset()

        assert not defaults.is_registered("app")
        assert defaults.schema("app") == {}


class TestSchema:
    """schema and environments."""

    def test_schema_is_defaults_section(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)

        schema = defaults.schema("app")

        assert list(schema) == ["database", "api", "log_level", "timeout", "enabled"]
        assert schema["database"]["port"] == 5432
        assert isinstance(schema["log_level"], Atom)
        assert defaults.state("app") is RegistrationState.SCHEMA_LOADED

    def test_schema_unregistered_is_empty(self, defaults):
        assert defaults.schema("unknown") == {}

    def test_schema_without_defaults_key(self, defaults, write_yaml):
        defaults.register("app", write_yaml("d.yml", "production:\n  a: 1\n"))

        assert defaults.schema("app") == {}

    def test_broken_defaults_degrade_to_empty(self, defaults, write_yaml, log_messages):
        defaults.register("app", write_yaml("d.yml", "defaults: [unclosed\n"))

        assert defaults.schema("app") == {}
        assert defaults.valid_environments("app") == []
        assert any("Failed to parse bundled defaults" in m for m in log_messages)

    def test_valid_environments(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)

        assert defaults.valid_environments("app") == ["development", "production", "test"]

    @pytest.mark.parametrize(
        ("env", "expected"),
        [
            ("production", True),
            ("development", True),
            ("staging", False),
            ("defaults", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_valid_environment(self, defaults, defaults_yml, env, expected):
        defaults.register("app", defaults_yml)

        assert defaults.is_valid_environment("app", env) is expected

    def test_merged_for_environment(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)

        merged = defaults.merged_for_environment("app", "production")

        assert merged["database"] == {"host": "prod-db.example.com", "port": 5432, "name": "app_prod"}
        assert merged["log_level"] == "warn"
        assert merged["timeout"] == 60

    def test_merged_for_unknown_environment_is_schema(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)

        assert defaults.merged_for_environment("app", "staging") == defaults.schema("app")

    def test_merged_does_not_mutate_schema(self, defaults, defaults_yml):
        defaults.register("app", defaults_yml)

        defaults.merged_for_environment("app", "production")["database"]["host"] = "x"

        assert defaults.schema("app")["database"]["host"] == "localhost"
