from git_deployer.deploy_config.deploy_config import DeployConfig, load_deploy_config
