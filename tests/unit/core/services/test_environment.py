from __future__ import annotations

"""
Unit tests for the Environment Snapshot service.
"""

import json

import pytest

from scanprops.core.services.environment import (
    EnvironmentSnapshot,
    filter_system_properties,
    load_environment_properties,
)
from scanprops.domain.errors import ConfigError


def test_env_variables_are_mapped_to_dotted_keys():
    env = {"SONAR_HOST_URL": "http://localhost:9000", "PATH": "/usr/bin", "SONAR_": "ignored"}
    assert load_environment_properties(env) == {"sonar.host.url": "http://localhost:9000"}


def test_json_params_are_merged_before_variables():
    env = {
        "SONARQUBE_SCANNER_PARAMS": json.dumps({"sonar.host.url": "from-json", "sonar.login": "x"}),
        "SONAR_HOST_URL": "from-var",
    }
    out = load_environment_properties(env)
    assert out["sonar.host.url"] == "from-var"
    assert out["sonar.login"] == "x"
    assert list(out)[0] == "sonar.host.url"


def test_invalid_json_params_raise_config_error():
    with pytest.raises(ConfigError):
        load_environment_properties({"SONARQUBE_SCANNER_PARAMS": "{not json"})


def test_non_object_json_params_raise_config_error():
    with pytest.raises(ConfigError):
        load_environment_properties({"SONARQUBE_SCANNER_PARAMS": "[1, 2]"})


def test_system_properties_are_allow_listed():
    props = {"sonar.projectKey": "k", "java.home": "/jdk", "sonarFlag": True}
    assert filter_system_properties(props) == {"sonar.projectKey": "k", "sonarFlag": "true"}


def test_capture_can_ignore_environment():
    snapshot = EnvironmentSnapshot.capture(
        {"sonar.verbose": "true"},
        env={"SONAR_HOST_URL": "h"},
        use_environment=False,
    )
    assert snapshot.environment_properties == {}
    assert snapshot.system_properties == {"sonar.verbose": "true"}


def test_system_properties_win_over_environment():
    snapshot = EnvironmentSnapshot.capture(
        {"sonar.host.url": "from-cli"},
        env={"SONAR_HOST_URL": "from-env", "SONAR_TOKEN": "t"},
    )
    assert snapshot.merged() == {"sonar.host.url": "from-cli", "sonar.token": "t"}


def test_empty_snapshot():
    assert EnvironmentSnapshot.empty().merged() == {}
