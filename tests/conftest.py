from __future__ import annotations

import io
import json

import pytest

from git_deployer.deploy_config import DeployConfig
from git_deployer.deploy_logger import DeployLogger
from git_deployer.errors import CommandError, SessionError
from git_deployer.ssh_agent import CommandResult


class FakeSession:
    """Records every command and answers from a table of canned outcomes."""

    def __init__(self, failures=None, transport_errors=(), crashes=None):
        self.commands = []
        self.failures = failures or {}
        self.transport_errors = set(transport_errors)
        self.crashes = crashes or {}
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.closed = True

    def execute(self, command):
        self.commands.append(command)
        if command in self.crashes:
            raise self.crashes[command]
        if command in self.transport_errors:
            raise CommandError(command, "timed out")
        if command in self.failures:
            return CommandResult(command, self.failures[command], "partial out", "boom", None)
        return CommandResult(command, 0, "", "", None)


class FakeConnector:
    """Stands in for SSHAgent.connect, one FakeSession per host."""

    def __init__(self, unreachable=(), **session_kwargs):
        self.unreachable = set(unreachable)
        self.session_kwargs = session_kwargs
        self.sessions = {}
        self.calls = []

    def __call__(self, host, username, logger=None, **kwargs):
        self.calls.append((host, username, kwargs))
        if host in self.unreachable:
            raise SessionError(host, username, "Connection refused")
        session = FakeSession(**self.session_kwargs)
        self.sessions[host] = session
        return session


class FakeChannel:
    """
    Plays back (stream, data) writes of a remote command through a flow control window.

    Like an ssh server, the writer stalls while the unread data of both streams fills the
    window, so a reader that ignores one stream never sees the rest of the other.
    """

    def __init__(self, writes, exit_status=0, window=2 * 1024 * 1024, chunk=64 * 1024, never_exits=False):
        self.pending = []
        for stream, data in writes:
            for start in range(0, len(data), chunk):
                self.pending.append((stream, data[start:start + chunk]))
        self.buffers = {"out": bytearray(), "err": bytearray()}
        self.exit_status = exit_status
        self.window = window
        self.never_exits = never_exits

    def _produce(self):
        while self.pending:
            unread = len(self.buffers["out"]) + len(self.buffers["err"])
            stream, data = self.pending[0]
            if unread + len(data) > self.window:
                return
            self.buffers[stream] += data
            self.pending.pop(0)

    def _take(self, stream, nbytes):
        data = bytes(self.buffers[stream][:nbytes])
        del self.buffers[stream][:nbytes]
        return data

    def recv_ready(self):
        self._produce()
        return bool(self.buffers["out"])

    def recv_stderr_ready(self):
        self._produce()
        return bool(self.buffers["err"])

    def recv(self, nbytes):
        return self._take("out", nbytes)

    def recv_stderr(self, nbytes):
        return self._take("err", nbytes)

    def exit_status_ready(self):
        self._produce()
        return not self.never_exits and not self.pending

    def recv_exit_status(self):
        return self.exit_status



@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(log_stream: io.StringIO) -> DeployLogger:
    return DeployLogger(stream=log_stream, verbose=True)


@pytest.fixture
def config() -> DeployConfig:
    return DeployConfig(
        host="",
        user="deploy",
        deploy_directory="/srv/app",
        app="app",
        repo="git@x:y.git",
        commands=("./build.sh",),
    )


@pytest.fixture
def write_config(tmp_path):
    def _write(app: str, payload) -> str:
        path = tmp_path / f"{app}.json"
        if isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        else:
            path.write_text(json.dumps(payload), encoding="utf-8")
        return str(tmp_path)

    return _write


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def make_connector():
    return FakeConnector


@pytest.fixture
def make_channel():
    return FakeChannel
