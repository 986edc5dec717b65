"""tcenv - provision and drive local TeamCity environments for plugin testing.

    Returns:
        int: Exit code
"""
import json
import logging
import sys
import tarfile

from args import parse_args
from common.http_client import DownloadError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes, _load_yaml_config
from environments.loader import load_extension
from environments.overrides import MapPropertySource, parse_property_assignments
from errors import ConfigurationError
from launch.commands import agent_command, server_command
from launch.install import deploy_plugins, download_distribution, undeploy_plugins, unpack_distribution
from launch.runner import LaunchError, current_platform, run_command

logger = logging.getLogger(__name__)


def _setup_logging(args):
    """Configure logging based on CLI arguments."""
    configure_logging(level=getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def build_extension(args):
    """Load the config file and apply ``-P`` overrides on top of it."""
    properties = MapPropertySource(parse_property_assignments(args.PROPERTIES))
    config = _load_yaml_config(args.CONFIG)
    return load_extension(config, properties, args.PROJECT_DIR)


def _print_environments(extension):
    environments = extension.environments
    if not len(environments):
        print("No environments declared.")
        return
    for env in environments:
        print(f"{env.name}\t{env.version}")


def _launch(env, command, platform_name):
    action, target = command.split("-", 1)
    builder = server_command if target == "server" else agent_command
    return run_command(builder(env, action, platform_name))


def execute(args, extension):
    """Run the selected command against the loaded extension."""
    command = args.COMMAND
    if command == "list":
        _print_environments(extension)
        return ExitCodes.SUCCESS.value

    env = extension.environments.get(args.ENVIRONMENT)
    if command == "show":
        print(json.dumps(env.as_dict(), indent=2))
    elif command == "download":
        download_distribution(env, force=args.FORCE)
    elif command == "install":
        download_distribution(env, force=args.FORCE)
        unpack_distribution(env)
    elif command == "deploy":
        deploy_plugins(env)
    elif command == "undeploy":
        undeploy_plugins(env)
    else:
        platform_name = args.PLATFORM or current_platform()
        code = _launch(env, command, platform_name)
        if code != 0:
            return ExitCodes.EXECUTION_ERROR.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND)
        )

    try:
        extension = build_extension(args)
        return execute(args, extension)
    except (ConfigurationError, ValueError, KeyError) as exc:
        logger.error("Configuration error: %s", exc.args[0] if isinstance(exc, KeyError) else exc)
        return ExitCodes.CONFIG_ERROR.value
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value
    except (DownloadError, LaunchError, tarfile.TarError, OSError) as exc:
        logger.error("%s", exc)
        return ExitCodes.EXECUTION_ERROR.value


if __name__ == "__main__":
    sys.exit(main())
