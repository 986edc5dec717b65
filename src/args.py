"""Argument parsing functionality for tcenv."""

import argparse

from constants import Platforms

COMMANDS = {
    "list": "List declared environments",
    "show": "Show the resolved settings of an environment",
    "download": "Download the TeamCity distribution",
    "install": "Download and unpack the TeamCity distribution",
    "deploy": "Deploy plugins to the environment",
    "undeploy": "Remove deployed plugins from the environment",
    "start-server": "Start the TeamCity server",
    "stop-server": "Stop the TeamCity server",
    "start-agent": "Start the TeamCity build agent",
    "stop-agent": "Stop the TeamCity build agent",
}


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="tcenv",
        description="Manage local TeamCity environments used to test plugins",
        add_help=True,
    )

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to YAML config file (default: tcenv.yml, $TCENV_CONFIG)",
                        action="store",
                        type=str)
    parser.add_argument("-P", "--property",
                        dest="PROPERTIES",
                        help="Override property, e.g. -P teamcity.environments.ci.homeDir=/opt/tc",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--project-dir",
                        dest="PROJECT_DIR",
                        help="Directory default base directories are relative to (default: cwd)",
                        action="store",
                        type=str)
    parser.add_argument("--platform",
                        dest="PLATFORM",
                        help="Platform used to select start/stop scripts (default: detected)",
                        action="store",
                        type=str.lower,
                        choices=[p.value for p in Platforms])
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", metavar="command", required=True)
    for name, help_text in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        if name == "list":
            continue
        sub.add_argument("ENVIRONMENT", help="Environment name")
        if name in ("download", "install"):
            sub.add_argument("-f", "--force",
                             dest="FORCE",
                             help="Download even if the installer file exists",
                             action="store_true")

    return parser.parse_args(argv)
