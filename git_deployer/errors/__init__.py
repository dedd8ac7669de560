from git_deployer.errors.errors import (
    DeployError,
    ConfigError,
    ConfigNotFound,
    ConfigInvalid,
    SessionError,
    CommandError,
)
