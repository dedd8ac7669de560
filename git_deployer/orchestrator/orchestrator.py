#!/usr/bin/env python3

"""
    This python file holds the steps of a deploy. A deploy of a branch to a host goes through four steps, each of them
    a fixed list of commands run on one ssh session:

        - Setup of the work directory: <deploy dir>, releases/, shared/ and releases/build/ are created.
        - Checkout: the repo is cloned in releases/build and the branch/tag/revision is checked out.
        - Command chain: the commands of the config are run in order.
        - Promotion: releases/build is renamed to releases/<timestamp> and the "current" symlink points to it.

    Nothing is retried or rolled back. A failed command is logged and the deploy goes on, so a deploy can end half
    applied. A second deploy over a left over releases/build fails on mkdir and git clone until it is removed by hand.
"""

import datetime

from git_deployer.command_runner import run_command, run_command_chain
from git_deployer.deploy_config import load_deploy_config
from git_deployer.deploy_logger import DeployLogger
from git_deployer.ssh_agent import SSHAgent

RELEASE_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class DeployReport():
    """
        Summary of the deploy of one branch to one host.
    """
    def __init__(self, host, app, branch, results, release=None):

        self.host = host
        self.app = app
        self.branch = branch
        self.results = list(results)
        self.release = release

    @property
    def failed_results(self):
        return [result for result in self.results if not result.succeeded]

    @property
    def succeeded(self):
        return not self.failed_results

    def summary(self):

        if self.succeeded:
            return "Deployed {} of {} to {} as release {}".format(self.branch, self.app, self.host, self.release)

        return "Deploy of {} of {} to {} finished with {} failed command(s) out of {}".format(
            self.branch, self.app, self.host, len(self.failed_results), len(self.results))


def build_directory(config):
    return "{}/releases/build".format(config.deploy_directory)


def release_timestamp(now=None):
    """
        Label of a release, YYYYMMDDHHMMSS of the given time or of now.
    """
    if now is None:
        now = datetime.datetime.now()

    return now.strftime(RELEASE_TIMESTAMP_FORMAT)


def setup_work_directory(config, session, logger):
    """
        Makes sure the build directory exists. mkdir is run without -p, so directories left from an earlier deploy make
        these commands fail, which is only logged.
    """

    commands = [
        "mkdir {}".format(config.deploy_directory),
        "mkdir {}/releases".format(config.deploy_directory),
        "mkdir {}/shared".format(config.deploy_directory),
        "mkdir {}".format(build_directory(config)),
    ]

    return run_command_chain(commands, session, logger)


def checkout_repo(branch, config, session, logger):
    """
        Clones the repo in the build directory and checks out the branch, tag or revision.

        :param str branch: Branch, tag or revision to deploy.
        :param DeployConfig config: Config of the application.
        :param SSHAgent session: Open remote session.
        :param DeployLogger logger: Logger of the deploy.

        :return: The list of CommandResult of the clone and the checkout.
    """

    directory = build_directory(config)

    return [
        run_command("git clone {} {}".format(config.repo, directory), session, logger),
        run_command("cd {} && git checkout {}".format(directory, branch), session, logger),
    ]


def promote_release(config, session, logger, now=None):
    """
        Moves the build directory to a timestamped release directory and points the "current" symlink at it.

        :return: A tuple (timestamp of the release, list of CommandResult).
    """

    timestamp = release_timestamp(now)
    release_directory = "{}/releases/{}".format(config.deploy_directory, timestamp)

    results = [
        run_command("mv {} {}".format(build_directory(config), release_directory), session, logger),
        run_command("ln -sf {} {}/current".format(release_directory, config.deploy_directory), session, logger),
    ]

    return timestamp, results


def deploy_release(host, config, branch, logger=None, connect=None, **connect_kwargs):
    """
        This method opens a session to the host as the user of the config, runs every step of the deploy on it and
        closes it, whatever happened.

        :param str host: Host to deploy to, "host" or "host:port".
        :param DeployConfig config: Config of the application.
        :param str branch: Branch, tag or revision to deploy.
        :param DeployLogger logger: Logger of the deploy.
        :param connect: Callable (host, user, logger=..., **connect_kwargs) returning an open session, SSHAgent.connect
                        when None.

        :raises SessionError: If the session can not be opened. No command has been run in that case.

        :return: The DeployReport of the deploy.
    """

    if logger is None:
        logger = DeployLogger()

    if connect is None:
        connect = SSHAgent.connect

    results = []

    with connect(host, config.user, logger=logger, **connect_kwargs) as session:

        results += setup_work_directory(config, session, logger)
        results += checkout_repo(branch, config, session, logger)
        results += run_command_chain(config.commands, session, logger)

        release, promote_results = promote_release(config, session, logger)
        results += promote_results

    report = DeployReport(host=host, app=config.app, branch=branch, results=results, release=release)

    if report.succeeded:
        logger.info(report.summary())
    else:
        logger.error(report.summary())

    return report


def split_hosts(hosts):
    """
        Splits a comma separated list of hosts, dropping empty entries.
    """
    return [host.strip() for host in hosts.split(",") if host.strip()]


def deploy_to_hosts(hosts, config, branch, logger=None, connect=None, **connect_kwargs):
    """
        Deploys to each host of a comma separated list, one after the other. Every host gets its own session and its
        own report; a SessionError on one host stops the remaining ones.

        :return: The list of DeployReport, one per host.
    """

    ret_val = []

    for host in split_hosts(hosts):
        ret_val.append(deploy_release(host, config, branch, logger=logger, connect=connect, **connect_kwargs))

    return ret_val


def perform_deploy(host, app, branch, logger=None, config_dir=".", connect=None, **connect_kwargs):
    """
        Loads the config of the application and deploys the branch to the host.

        :raises ConfigError: If the config can not be loaded.
        :raises SessionError: If the session can not be opened.

        :return: The DeployReport of the deploy.
    """

    if logger is None:
        logger = DeployLogger()

    config = load_deploy_config(app, config_dir=config_dir, logger=logger)

    return deploy_release(host, config, branch, logger=logger, connect=connect, **connect_kwargs)
