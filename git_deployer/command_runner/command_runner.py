#!/usr/bin/env python3

"""
    Runs commands on a remote session and logs what happened. A failed command is reported but never stops the commands
    that come after it; the caller decides what a failure means from the returned results.
"""

from git_deployer.errors import CommandError
from git_deployer.ssh_agent import CommandResult


def run_command(command, session, logger):
    """
        This method runs one command on the session and logs its output. Errors from the session are caught and
        returned as a failed CommandResult.

        :param str command: Command to run, sent as is.
        :param SSHAgent session: Open remote session.
        :param DeployLogger logger: Logger of the deploy.

        :return: The CommandResult of the command.
    """

    logger.info("Running {}".format(command))

    try:
        result = session.execute(command)

    except CommandError as e:
        result = CommandResult(command=command, exit_status=None, stdout="", stderr="", error=str(e.reason))

    if not result.succeeded:

        if result.error is not None:
            logger.error(result.error)
        else:
            logger.error("Process finished with exit code {}".format(result.exit_status))

        logger.error("STDOUT: " + result.stdout)
        logger.error("STDERR: " + result.stderr)

    elif result.output:

        logger.info(result.output)

    return result


def run_command_chain(commands, session, logger):
    """
        Runs every command in order, each one to completion before the next.

        :return: The list of CommandResult, in the order of the commands.
    """

    ret_val = []

    for command in commands:
        ret_val.append(run_command(command, session, logger))

    return ret_val
