#!/usr/bin/env python3

"""
    This python file holds the loader of the per application deploy config. The config of an application named "shop"
    is the json file "shop.json" and must look like:

        {
            "Host": "web1.example.com",
            "User": "deploy",
            "DeployDirectory": "/srv/shop",
            "App": "shop",
            "Repo": "git@github.com:example/shop.git",
            "Commands": ["cd /srv/shop/releases/build && ./build.sh"]
        }

    User, DeployDirectory and Repo are required. Host, App and Commands may be left out.
"""

import collections
import json
import os

from schema import Schema, SchemaError, And, Optional, Use

from git_deployer.errors import ConfigNotFound, ConfigInvalid

HOST_CFG_KEY = "Host"
USER_CFG_KEY = "User"
DEPLOY_DIRECTORY_CFG_KEY = "DeployDirectory"
APP_CFG_KEY = "App"
REPO_CFG_KEY = "Repo"
COMMANDS_CFG_KEY = "Commands"

CFG_FILE_VALIDATION = Schema({
    Optional(HOST_CFG_KEY, default=""): str,
    USER_CFG_KEY: And(str, len, error="User must be a non empty string"),
    DEPLOY_DIRECTORY_CFG_KEY: And(str, lambda path: path.startswith("/") and path.strip("/") != "",
                                  error="DeployDirectory must be an absolute path other than /"),
    Optional(APP_CFG_KEY, default=""): str,
    REPO_CFG_KEY: And(str, len, error="Repo must be a non empty string"),
    Optional(COMMANDS_CFG_KEY, default=()): And([str], Use(tuple))
}, ignore_extra_keys=True)

DeployConfig = collections.namedtuple("DeployConfig", ["host", "user", "deploy_directory", "app", "repo", "commands"])


def config_file_path(app, config_dir="."):
    return os.path.join(config_dir, "{}.json".format(app))


def load_deploy_config(app, config_dir=".", logger=None):
    """
        This method reads "<app>.json" from the config directory and returns it as a DeployConfig.

        :param str app: Name of the application, also the name of its config file.
        :param str config_dir: Directory holding the config files.
        :param DeployLogger logger: Optional logger.

        :raises ConfigNotFound: If the file can not be opened.
        :raises ConfigInvalid: If the file is not json or does not have the expected shape.

        :return: The DeployConfig of the application.
    """

    config_path = config_file_path(app, config_dir)

    if logger: logger.debug("Reading config file {}".format(config_path))

    try:
        with open(config_path) as config_file:
            config_json = json.load(config_file)

    except ValueError as e:
        raise ConfigInvalid(config_path, e) from e

    except OSError as e:
        raise ConfigNotFound(config_path, e.strerror or e) from e

    try:
        config_json = CFG_FILE_VALIDATION.validate(config_json)

    except SchemaError as e:
        raise ConfigInvalid(config_path, e) from e

    deploy_directory = config_json[DEPLOY_DIRECTORY_CFG_KEY].rstrip("/")

    return DeployConfig(
        host=config_json[HOST_CFG_KEY],
        user=config_json[USER_CFG_KEY],
        deploy_directory=deploy_directory,
        app=config_json[APP_CFG_KEY] or app,
        repo=config_json[REPO_CFG_KEY],
        commands=config_json[COMMANDS_CFG_KEY]
    )
