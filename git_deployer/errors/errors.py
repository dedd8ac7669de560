#!/usr/bin/env python3

"""
    Exceptions raised while deploying a release.

    Only ConfigError and SessionError stop a deploy. A CommandError is raised by the ssh agent when a command could not
    be run at all and is turned into a failed CommandResult by the command runner.
"""


class DeployError(Exception):
    """
        Base class of every error raised by the deployer.
    """
    pass


class ConfigError(DeployError):
    pass


class ConfigNotFound(ConfigError):

    def __init__(self, config_path, reason):

        self.config_path = config_path
        self.reason = reason
        super().__init__("Config file [{}] could not be read: {}".format(config_path, reason))


class ConfigInvalid(ConfigError):

    def __init__(self, config_path, reason):

        self.config_path = config_path
        self.reason = reason
        super().__init__("Config file [{}] is not valid: {}".format(config_path, reason))


class SessionError(DeployError):

    def __init__(self, host, username, reason):

        self.host = host
        self.username = username
        self.reason = reason
        super().__init__("Unable to SSH connect to {}@{}: {}".format(username, host, reason))


class CommandError(DeployError):

    def __init__(self, command, reason):

        self.command = command
        self.reason = reason
        super().__init__("Command [{}] could not be run: {}".format(command, reason))
