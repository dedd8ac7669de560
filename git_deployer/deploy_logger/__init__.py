from git_deployer.deploy_logger.deploy_logger import DeployLogger
