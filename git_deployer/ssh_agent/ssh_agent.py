#!/usr/bin/env python3

"""
    This python file holds the ssh_agent used to connect and run commands via ssh to a given server.

    The agent is the remote session of a deploy: it is opened once, every command of the deploy goes through
    execute(), and it is closed when the deploy is over. It can be used as a context manager so the connection is
    closed even when the deploy fails half way.
"""

import argparse
import collections
import time

import paramiko

from git_deployer.deploy_logger import DeployLogger
from git_deployer.errors import SessionError, CommandError

DEFAULT_SSH_PORT = 22
RECV_BUFFER_SIZE = 32768
POLL_INTERVAL = 0.01


class CommandResult(collections.namedtuple("CommandResult", ["command", "exit_status", "stdout", "stderr", "error"])):
    """
        Outcome of one remote command. exit_status is None and error holds the reason when the command could not be
        run at all.
    """
    __slots__ = ()

    @property
    def succeeded(self):
        return self.error is None and self.exit_status == 0

    @property
    def output(self):
        return "".join(part for part in (self.stdout, self.stderr) if part)


def parse_host(host):
    """
        Splits "host", "host:port" or "[ipv6]:port" into its host name and port.

        :param str host: Host given on the command line.

        :raises ValueError: If the host name is empty or the port is not a number.

        :return: A tuple (hostname, port).
    """

    host = host.strip()

    if host.startswith("["):
        hostname, _, rest = host[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else rest
    elif host.count(":") == 1:
        hostname, _, port = host.partition(":")
    else:
        hostname, port = host, ""

    if not hostname:
        raise ValueError("Missing host name in [{}]".format(host))

    if not port:
        return hostname, DEFAULT_SSH_PORT

    if not port.isdigit():
        raise ValueError("Invalid port in host [{}]".format(host))

    return hostname, int(port)


class SSHAgent():
    """
        This is the ssh_agent class. It is used to send commands to a given server via ssh.
    """
    def __init__(self, host, username, timeout=None, accept_unknown_hosts=False, logger=None):

        try:
            self.host, self.port = parse_host(host)
        except ValueError as e:
            raise SessionError(host, username, e) from e

        self.username = username
        self.timeout = timeout
        self.accept_unknown_hosts = accept_unknown_hosts
        self.logger = logger if logger is not None else DeployLogger()

        self.ssh = None
        self._ssh_connect()

    @classmethod
    def connect(cls, host, username, **kwargs):
        return cls(host, username, **kwargs)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):

        if self.ssh is None:
            return

        self.logger.debug("Closing SSH Connection")
        self.ssh.close()
        self.ssh = None
        self.logger.debug("Connection to {} closed.".format(self.host))

    def execute(self, command):
        """
            Runs the command in a single shell invocation on the server and waits for it to finish. The command string is
            sent as is, nothing is quoted.

            :param str command: Command to run.

            :raises CommandError: If the command could not be sent or its output could not be read, including timeouts.

            :return: The CommandResult of the command.
        """

        if self.ssh is None:
            raise CommandError(command, "SSH connection to {} is closed".format(self.host))

        try:

            stdin, stdout, stderr = self.ssh.exec_command(command, timeout=self.timeout)
            stdin.close()

            out, err = self._drain_channel(command, stdout.channel)
            exit_status = stdout.channel.recv_exit_status()

        except (paramiko.SSHException, OSError) as e:
            raise CommandError(command, str(e) or type(e).__name__) from e

        return CommandResult(command=command, exit_status=exit_status,
                             stdout=out.decode("utf-8", errors="replace"),
                             stderr=err.decode("utf-8", errors="replace"), error=None)

    # ////////////////////// Helpers ////////////////////// #

    def _drain_channel(self, command, channel):
        """
            Reads stdout and stderr of the channel side by side until the command has exited and both are empty. The
            server stops sending once the window of the channel is full, so a stream left unread can block the other.

            :param str command: Command running on the channel, used in the timeout error.
            :param paramiko.Channel channel: Channel of the command.

            :raises CommandError: If the command is still running after timeout seconds.

            :return: A tuple (stdout bytes, stderr bytes).
        """

        out_chunks = []
        err_chunks = []
        started = time.monotonic()

        while True:

            received = False

            if channel.recv_ready():
                out_chunks.append(channel.recv(RECV_BUFFER_SIZE))
                received = True

            if channel.recv_stderr_ready():
                err_chunks.append(channel.recv_stderr(RECV_BUFFER_SIZE))
                received = True

            if received:
                continue

            if channel.exit_status_ready() and not channel.recv_ready() and not channel.recv_stderr_ready():
                break

            if self.timeout is not None and time.monotonic() - started > self.timeout:
                raise CommandError(command, "Timed out after {}s".format(self.timeout))

            time.sleep(POLL_INTERVAL)

        return b"".join(out_chunks), b"".join(err_chunks)

    def _ssh_connect(self):
        """
            This method will connect to an ssh server given its class variables instantiated in the init method.
            Hosts missing from the system known_hosts are rejected unless accept_unknown_hosts is set.

            :raises SessionError: If the connection or the authentication fails.
        """

        self.logger.debug("SSH Connecting to: Host-{}, Port-{}, Username-{}".format(self.host, self.port, self.username))

        ssh = paramiko.SSHClient()

        try:

            ssh.load_system_host_keys()
            if self.accept_unknown_hosts:
                ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())

            ssh.connect(hostname=self.host, port=self.port, username=self.username, timeout=self.timeout)

        except (paramiko.SSHException, OSError) as e:
            ssh.close()
            raise SessionError(self.host, self.username, e) from e

        self.ssh = ssh
        self.logger.debug("Connected")


def main(host, username, command, verbose=False):
    """
        Runs a single command on a server, handy to check that a host is reachable before deploying to it.
    """
    logger = DeployLogger(verbose=verbose)

    with SSHAgent.connect(host, username, logger=logger) as ssh:
        result = ssh.execute(command)

    logger.info("{}: {}".format(host, result.output))
    logger.info("Process finished with exit code {}".format(result.exit_status))

    return result.exit_status


if __name__ == "__main__":
    parser = argparse.ArgumentParser(formatter_class=argparse.ArgumentDefaultsHelpFormatter)

    parser.add_argument('-H', '--host', dest='host', action='store', required=True, help='Host of SSH Server to connect to')
    parser.add_argument('-U', '--username', dest='username', action='store', required=True, help='Username used for SSH connection')
    parser.add_argument('-C', '--command', dest='command', action='store', default='uname -a', help='Command to run')
    parser.add_argument('-v', '--verbose', dest='verbose', action='store_true', required=False, default=False, help='Turns on verbosity')

    args = parser.parse_args()

    raise SystemExit(main(host=args.host, username=args.username, command=args.command, verbose=args.verbose))
