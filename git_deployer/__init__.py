"""
    git_deployer clones a revision of an application on a server over ssh, runs its build commands and switches the
    "current" symlink to the new release.
"""

from git_deployer.orchestrator import perform_deploy, deploy_release, deploy_to_hosts, DeployReport

__version__ = "0.1.0"
