from git_deployer.orchestrator.orchestrator import (
    DeployReport,
    setup_work_directory,
    checkout_repo,
    promote_release,
    release_timestamp,
    deploy_release,
    deploy_to_hosts,
    perform_deploy,
    split_hosts,
)
