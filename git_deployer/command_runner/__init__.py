from git_deployer.command_runner.command_runner import run_command, run_command_chain
