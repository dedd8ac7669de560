from __future__ import annotations

import pytest

from git_deployer.deploy_config import load_deploy_config
from git_deployer.errors import ConfigError, ConfigInvalid, ConfigNotFound


def test_load_full_config(write_config) -> None:
    config_dir = write_config("shop", {
        "Host": "web1",
        "User": "deploy",
        "DeployDirectory": "/srv/shop",
        "App": "shop",
        "Repo": "git@x:y.git",
        "Commands": ["./build.sh", "./migrate.sh"],
    })

    config = load_deploy_config("shop", config_dir=config_dir)

    assert config.host == "web1"
    assert config.user == "deploy"
    assert config.deploy_directory == "/srv/shop"
    assert config.app == "shop"
    assert config.repo == "git@x:y.git"
    assert config.commands == ("./build.sh", "./migrate.sh")


def test_optional_keys_get_defaults_and_extra_keys_are_ignored(write_config) -> None:
    config_dir = write_config("shop", {
        "User": "deploy",
        "DeployDirectory": "/srv/shop/",
        "Repo": "git@x:y.git",
        "Unknown": 42,
    })

    config = load_deploy_config("shop", config_dir=config_dir)

    assert config.host == ""
    assert config.app == "shop"
    assert config.commands == ()
    assert config.deploy_directory == "/srv/shop"


def test_missing_file_raises_config_not_found(tmp_path) -> None:
    with pytest.raises(ConfigNotFound) as excinfo:
        load_deploy_config("nope", config_dir=str(tmp_path))

    assert excinfo.value.config_path.endswith("nope.json")
    assert isinstance(excinfo.value, ConfigError)


def test_malformed_json_raises_config_invalid(write_config) -> None:
    config_dir = write_config("shop", "{not json")

    with pytest.raises(ConfigInvalid):
        load_deploy_config("shop", config_dir=config_dir)


@pytest.mark.parametrize(
    "payload",
    [
        {"DeployDirectory": "/srv/shop", "Repo": "git@x:y.git"},
        {"User": "", "DeployDirectory": "/srv/shop", "Repo": "git@x:y.git"},
        {"User": "deploy", "DeployDirectory": "srv/shop", "Repo": "git@x:y.git"},
        {"User": "deploy", "DeployDirectory": "/", "Repo": "git@x:y.git"},
        {"User": "deploy", "DeployDirectory": "//", "Repo": "git@x:y.git"},
        {"User": "deploy", "DeployDirectory": "/srv/shop", "Repo": "git@x:y.git", "Commands": "./build.sh"},
        {"User": "deploy", "DeployDirectory": "/srv/shop", "Repo": "git@x:y.git", "Commands": [1, 2]},
        ["not", "an", "object"],
    ],
)
def test_shape_errors_raise_config_invalid(write_config, payload) -> None:
    config_dir = write_config("shop", payload)

    with pytest.raises(ConfigInvalid):
        load_deploy_config("shop", config_dir=config_dir)
