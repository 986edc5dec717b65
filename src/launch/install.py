"""Download, unpack and plugin deployment for an environment."""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
from typing import List

from common.http_client import download_file
from constants import Constants
from environments.environment import TeamCityEnvironment

logger = logging.getLogger(__name__)


def download_distribution(environment: TeamCityEnvironment, force: bool = False) -> str:
    """Download the distribution to the installer file unless already present."""
    installer = environment.installer_file
    if os.path.isfile(installer) and not force:
        logger.info("Using cached distribution %s", installer)
        return installer
    return download_file(environment.download_url, installer)


def _strip_root(name: str) -> str:
    parts = name.split("/", 1)
    if parts[0] == Constants.ARCHIVE_ROOT:
        return parts[1] if len(parts) > 1 else ""
    return name


def unpack_distribution(environment: TeamCityEnvironment) -> str:
    """Extract the installer archive into the environment's home directory.

    The top-level ``TeamCity/`` folder of the archive is dropped.

    Raises:
        FileNotFoundError: If the installer has not been downloaded.
        tarfile.TarError: If a member would be written outside the home dir.
    """
    installer = environment.installer_file
    if not os.path.isfile(installer):
        raise FileNotFoundError(f"Distribution not found: {installer}")
    home_dir = os.path.abspath(environment.home_dir)
    os.makedirs(home_dir, exist_ok=True)

    with tarfile.open(installer, "r:gz") as archive:
        members = []
        for member in archive.getmembers():
            member.name = _strip_root(member.name)
            if not member.name:
                continue
            target = os.path.abspath(os.path.join(home_dir, member.name))
            if os.path.commonpath([home_dir, target]) != home_dir:
                raise tarfile.TarError(f"Archive member escapes target directory: {member.name}")
            members.append(member)
        archive.extractall(home_dir, members=members, filter="data")
    logger.info("Unpacked %s into %s", installer, home_dir)
    return home_dir


def deploy_plugins(environment: TeamCityEnvironment) -> List[str]:
    """Copy the environment's plugin archives into its plugins directory.

    Raises:
        FileNotFoundError: If a plugin archive does not exist.
    """
    plugins_dir = environment.plugins_dir
    os.makedirs(plugins_dir, exist_ok=True)
    deployed = []
    for plugin in environment.plugins:
        if not os.path.isfile(plugin):
            raise FileNotFoundError(f"Plugin archive not found: {plugin}")
        target = os.path.join(plugins_dir, os.path.basename(plugin))
        shutil.copy2(plugin, target)
        deployed.append(target)
        logger.info("Deployed %s to %s", os.path.basename(plugin), plugins_dir)
    return deployed


def undeploy_plugins(environment: TeamCityEnvironment) -> List[str]:
    """Remove the environment's plugin archives from its plugins directory."""
    plugins_dir = environment.plugins_dir
    removed = []
    for plugin in environment.plugins:
        target = os.path.join(plugins_dir, os.path.basename(plugin))
        if os.path.isfile(target):
            os.remove(target)
            removed.append(target)
            logger.info("Undeployed %s from %s", os.path.basename(plugin), plugins_dir)
    return removed
