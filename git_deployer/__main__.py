#!/usr/bin/env python3

import argparse
import sys

from git_deployer.deploy_config import load_deploy_config
from git_deployer.deploy_logger import DeployLogger
from git_deployer.errors import ConfigError, SessionError
from git_deployer.orchestrator import deploy_to_hosts, split_hosts

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_COMMAND_FAILED = 2

APP_PROMPT = "Enter the application to deploy: "
HOST_PROMPT = "Enter the server(s) (multiple servers must be comma-separated) to deploy to: "
BRANCH_PROMPT = "Enter the branch/tag/version number to deploy: "


def build_parser():

    parser = argparse.ArgumentParser(prog="git-deployer", formatter_class=argparse.ArgumentDefaultsHelpFormatter,
                                     description="Deploy a branch/tag/revision of an application over ssh")

    parser.add_argument('-a', '--app', dest='app', action='store', required=False,
                        help='Application to deploy, its config is read from <app>.json')
    parser.add_argument('-H', '--host', dest='host', action='store', required=False,
                        help='Server(s) to deploy to, comma-separated, each "host" or "host:port"')
    parser.add_argument('-b', '--branch', dest='branch', action='store', required=False,
                        help='Branch/tag/revision to deploy')
    parser.add_argument('-c', '--config-dir', dest='config_dir', action='store', default='.',
                        help='Directory holding the <app>.json config files')
    parser.add_argument('-t', '--timeout', dest='timeout', action='store', type=float, default=None,
                        help='Timeout in seconds of the ssh connection and of each command')
    parser.add_argument('--accept-unknown-hosts', dest='accept_unknown_hosts', action='store_true', default=False,
                        help='Accept hosts missing from the system known_hosts file')
    parser.add_argument('-v', '--verbose', dest='verbose', action='store_true', required=False, default=False,
                        help='Turns on verbosity')

    return parser


def prompt(message, input_func=input):
    print(message)
    return input_func().strip()


def main(argv=None, input_func=input, stream=None):

    args = build_parser().parse_args(argv)
    logger = DeployLogger(stream=stream, verbose=args.verbose)

    try:
        application = args.app or prompt(APP_PROMPT, input_func)
        server = args.host or prompt(HOST_PROMPT, input_func)
        branch = args.branch or prompt(BRANCH_PROMPT, input_func)
    except EOFError:
        logger.error("No input to read, pass --app, --host and --branch when stdin is not interactive")
        return EXIT_FATAL

    try:
        config = load_deploy_config(application, config_dir=args.config_dir, logger=logger)
    except ConfigError as e:
        logger.error(e)
        return EXIT_FATAL

    # Host of the config file is only used when none was given
    if not split_hosts(server) and config.host:
        server = config.host

    if not split_hosts(server) or not branch:
        logger.error("A server and a branch/tag/version are needed to deploy")
        return EXIT_FATAL

    print("Preparing to deploy {} of {} to {} ...".format(branch, application, server))

    try:
        reports = deploy_to_hosts(server, config, branch, logger=logger, timeout=args.timeout,
                                  accept_unknown_hosts=args.accept_unknown_hosts)
    except SessionError as e:
        logger.error(e)
        return EXIT_FATAL

    if all(report.succeeded for report in reports):
        return EXIT_OK

    return EXIT_COMMAND_FAILED


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
