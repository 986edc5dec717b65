"""Tests for a single TeamCity environment's settings."""

import os

import pytest

from environments.overrides import MapPropertySource
from environments.registry import TeamCityEnvironments
from errors import InvalidVersionFormat, MissingDataVersionPrefix, UnresolvedSetting

DEFAULT_SERVER_OPTIONS = (
    "-Dteamcity.development.mode=true "
    "-Dteamcity.development.shadowCopyClasses=true "
    "-Dteamcity.superUser.token.saveToFile=true "
    "-Dteamcity.kotlinConfigsDsl.generateDslDocs=false"
)


@pytest.fixture
def properties():
    return MapPropertySource()


@pytest.fixture
def environments(properties, tmp_path):
    return TeamCityEnvironments(properties, str(tmp_path))


@pytest.fixture
def env(environments):
    return environments.environment("ci")


class TestDefaults:
    """Convention values of a new environment."""

    def test_default_version(self, env):
        assert env.version == "9.0"

    def test_default_download_url(self, env):
        assert env.download_url == "https://download.jetbrains.com/teamcity/TeamCity-9.0.tar.gz"

    def test_default_installer_file(self, env, tmp_path):
        assert env.installer_file == f"{tmp_path}/downloads/TeamCity-9.0.tar.gz"

    def test_default_home_dir(self, env, tmp_path):
        assert env.home_dir == f"{tmp_path}/servers/TeamCity-9.0"

    def test_default_data_dir(self, env, tmp_path):
        assert env.data_dir == f"{tmp_path}/data/9.0"

    def test_plugins_dir(self, env, tmp_path):
        assert env.plugins_dir == f"{tmp_path}/data/9.0/plugins"

    def test_default_server_options(self, env):
        assert env.server_options == DEFAULT_SERVER_OPTIONS

    def test_default_agent_options_empty(self, env):
        assert env.agent_options == ""

    def test_no_plugins(self, env):
        assert env.plugins == []

    def test_base_dirs_read_through(self, env, tmp_path):
        assert env.base_home_dir == os.path.join(str(tmp_path), "servers")
        assert env.base_data_dir == os.path.join(str(tmp_path), "data")


class TestVersion:
    """Version validation and derived values."""

    def test_derived_values_follow_version(self, env, tmp_path):
        env.version = "2020.1.3"
        assert env.download_url.endswith("/TeamCity-2020.1.3.tar.gz")
        assert env.installer_file == f"{tmp_path}/downloads/TeamCity-2020.1.3.tar.gz"
        assert env.home_dir == f"{tmp_path}/servers/TeamCity-2020.1.3"
        assert env.data_dir == f"{tmp_path}/data/2020.1"

    def test_snapshot_version_allowed(self, env, tmp_path):
        env.version = "2021.2-SNAPSHOT"
        assert env.data_dir == f"{tmp_path}/data/2021.2"

    def test_invalid_version_rejected_and_not_stored(self, env):
        with pytest.raises(InvalidVersionFormat) as exc:
            env.version = "latest"
        assert "'ci'" in str(exc.value)
        assert "'latest'" in str(exc.value)
        assert env.version == "9.0"

    def test_snapshot_sentinel_has_no_default_data_dir(self, env):
        env.version = "SNAPSHOT"
        with pytest.raises(MissingDataVersionPrefix) as exc:
            env.data_dir
        assert "'ci'" in str(exc.value)
        assert "dataDir" in str(exc.value)

    def test_snapshot_sentinel_with_explicit_data_dir(self, env):
        env.version = "SNAPSHOT"
        env.data_dir = "/data/snapshot"
        assert env.plugins_dir == "/data/snapshot/plugins"

    def test_explicit_home_dir_survives_version_change(self, env):
        env.home_dir = "/opt/teamcity"
        env.version = "2021.1"
        assert env.home_dir == "/opt/teamcity"

    def test_teamcity_version(self, env):
        env.version = "2020.1"
        assert str(env.teamcity_version) == "2020.1"


class TestOverrides:
    """External override properties take priority on every read."""

    def test_override_beats_explicit_value(self, env, properties):
        env.home_dir = "/own"
        properties.set("teamcity.environments.ci.homeDir", "/override")
        assert env.home_dir == "/override"
        properties.remove("teamcity.environments.ci.homeDir")
        assert env.home_dir == "/own"

    def test_clearing_own_value_restores_default(self, env, tmp_path):
        env.home_dir = "/own"
        env.home_dir = None
        assert env.home_dir == f"{tmp_path}/servers/TeamCity-9.0"

    def test_data_dir_override_moves_plugins_dir(self, env, properties):
        properties.set("teamcity.environments.ci.dataDir", "/override/data")
        assert env.plugins_dir == "/override/data/plugins"

    def test_download_url_override_changes_installer_file(self, env, properties, tmp_path):
        properties.set("teamcity.environments.ci.downloadUrl", "https://mirror/dist/TC-custom.tar.gz")
        assert env.installer_file == f"{tmp_path}/downloads/TC-custom.tar.gz"

    def test_options_override_returned_as_is(self, env, properties):
        properties.set("teamcity.environments.ci.serverOptions", "-Xmx4g  -Dfoo=bar")
        assert env.server_options == "-Xmx4g  -Dfoo=bar"

    def test_override_not_revalidated(self, env, properties):
        properties.set("teamcity.environments.ci.homeDir", "not a version anywhere")
        assert env.home_dir == "not a version anywhere"

    def test_shared_override_reaches_defaults(self, env, properties):
        properties.set("teamcity.environments.baseHomeDir", "/shared")
        assert env.home_dir == "/shared/TeamCity-9.0"

    def test_override_supplied_after_configuration(self, environments, properties):
        env = environments.environment("late")
        env.java_home = "/jdk/own"
        properties.set("teamcity.environments.late.javaHome", "/jdk/override")
        assert env.java_home == "/jdk/override"


class TestJavaHome:
    def test_from_process_environment(self, env, monkeypatch):
        monkeypatch.setenv("JAVA_HOME", "/usr/lib/jvm/java-11")
        assert env.java_home == "/usr/lib/jvm/java-11"

    def test_explicit_value(self, env, monkeypatch):
        monkeypatch.setenv("JAVA_HOME", "/usr/lib/jvm/java-11")
        env.java_home = "/opt/jdk8"
        assert env.java_home == "/opt/jdk8"

    def test_unresolved_without_java(self, env, monkeypatch):
        monkeypatch.delenv("JAVA_HOME", raising=False)
        monkeypatch.setattr("environments.environment.shutil.which", lambda name: None)
        with pytest.raises(UnresolvedSetting) as exc:
            env.java_home
        assert exc.value.setting == "javaHome"


class TestPlugins:
    """Plugin set: replace or append, no implicit de-duplication."""

    def test_set_replaces(self, env):
        env.plugins = ["a.zip"]
        env.plugins = ["b.zip", "c.zip"]
        assert env.plugins == ["b.zip", "c.zip"]

    def test_set_single_path(self, env):
        env.plugins = "a.zip"
        assert env.plugins == ["a.zip"]

    def test_add_appends_and_keeps_duplicates(self, env):
        env.add_plugins("a.zip")
        env.add_plugins(["a.zip", "b.zip"], "c.zip")
        assert env.plugins == ["a.zip", "a.zip", "b.zip", "c.zip"]

    def test_returned_list_is_a_copy(self, env):
        env.plugins.append("x.zip")
        assert env.plugins == []


class TestOptions:
    """Server and agent JVM options."""

    def test_set_list_replaces_defaults(self, env):
        env.set_server_options(["-Xmx2g", "-Dfoo=1"])
        assert env.server_options == "-Xmx2g -Dfoo=1"

    def test_set_string_is_one_option(self, env):
        env.set_server_options("-Xmx2g -Dfoo=1")
        assert env.server_options == "-Xmx2g -Dfoo=1"
        env.add_server_options("-Dbar=2")
        assert env.server_options == "-Xmx2g -Dfoo=1 -Dbar=2"

    def test_add_appends_to_defaults(self, env):
        env.add_server_options("-Xmx2g", "-Xmx2g")
        assert env.server_options == DEFAULT_SERVER_OPTIONS + " -Xmx2g -Xmx2g"

    def test_agent_options(self, env):
        env.add_agent_options("-Xmx512m")
        env.add_agent_options("-Dteamcity.agent=1")
        assert env.agent_options == "-Xmx512m -Dteamcity.agent=1"
        env.set_agent_options([])
        assert env.agent_options == ""

    def test_embedded_spaces_not_quoted(self, env):
        env.set_agent_options(["-Dname=a b", "-Dx=1"])
        assert env.agent_options == "-Dname=a b -Dx=1"


class TestAsDict:
    def test_contains_resolved_values(self, env, monkeypatch, tmp_path):
        monkeypatch.setenv("JAVA_HOME", "/jdk")
        env.version = "2020.1"
        env.add_plugins("plugin.zip")
        values = env.as_dict()
        assert values["name"] == "ci"
        assert values["dataDir"] == f"{tmp_path}/data/2020.1"
        assert values["javaHome"] == "/jdk"
        assert values["plugins"] == ["plugin.zip"]
        assert values["agentOptions"] == ""


class TestRegistryReference:
    def test_detached_environment_raises(self, properties, tmp_path):
        environments = TeamCityEnvironments(properties, str(tmp_path))
        env = environments.environment("ci")
        del environments
        with pytest.raises(RuntimeError):
            env.home_dir
