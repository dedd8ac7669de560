from git_deployer.ssh_agent.ssh_agent import SSHAgent, CommandResult, parse_host
