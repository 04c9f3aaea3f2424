"""
Test CLI functionality of mcpjson.

Commands run against a temporary configuration directory through
click's CliRunner.
"""

import json

import pytest
from click.testing import CliRunner
from pydantic import ValidationError as PydanticValidationError

from mcpjson import __version__
from mcpjson.cli.main import cli


class CLITestBase:
    """Shared runner setup."""

    @pytest.fixture(autouse=True)
    def _setup(self, temp_config_dir, tmp_path):
        self.runner = CliRunner()
        self.config_dir = temp_config_dir
        self.tmp_path = tmp_path

    def invoke(self, *args):
        return self.runner.invoke(cli, ["--config-dir", str(self.config_dir), *args])

    def profile_data(self, name):
        path = self.config_dir / "profiles" / f"{name}.json"
        return json.loads(path.read_text(encoding="utf-8"))

    def template_data(self, name):
        path = self.config_dir / "servers" / f"{name}.json"
        return json.loads(path.read_text(encoding="utf-8"))


class TestGlobalOptions(CLITestBase):
    """Test group level options."""

    def test_version(self):
        result = self.runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_dir_from_environment(self):
        result = self.runner.invoke(cli, ["create", "dev"],
                                    env={"MCPJSON_CONFIG_DIR": str(self.config_dir)})
        assert result.exit_code == 0
        assert (self.config_dir / "profiles" / "dev.json").exists()

    def test_help_lists_groups(self):
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "server" in result.output
        assert "reset" in result.output

    def test_invalid_setting_from_environment(self):
        result = self.runner.invoke(cli, ["--config-dir", str(self.config_dir), "list"],
                                    env={"MCPJSON_LOGGING__LEVEL": "LOUD"})
        assert result.exit_code == 7
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, PydanticValidationError)

    def test_invalid_setting_from_config_file(self):
        (self.tmp_path / ".mcpjson.toml").write_text(
            '[logging]\nformat_type = "xml"\n', encoding="utf-8"
        )
        result = self.invoke("list")
        assert result.exit_code == 7
        assert "Invalid configuration" in result.output


class TestProfileCommands(CLITestBase):
    """Test top level profile commands."""

    def test_create_and_list(self):
        result = self.invoke("create", "dev", "--description", "Development")
        assert result.exit_code == 0
        assert "Created profile 'dev'" in result.output

        result = self.invoke("list")
        assert result.exit_code == 0
        assert "dev" in result.output

    def test_create_default_profile(self):
        result = self.invoke("create")
        assert result.exit_code == 0
        assert self.profile_data("default")["name"] == "default"

    def test_create_existing(self):
        self.invoke("create", "dev")
        result = self.invoke("create", "dev")
        assert result.exit_code == 2
        assert "already exists" in result.output

    def test_create_invalid_name(self):
        result = self.invoke("create", "bad name")
        assert result.exit_code == 7

    def test_create_reserved_name(self):
        result = self.invoke("create", "server")
        assert result.exit_code == 7
        assert "reserved" in result.output

    def test_list_empty(self):
        result = self.invoke("list")
        assert result.exit_code == 0
        assert "No profiles found" in result.output

    def test_list_reports_corrupt_profile(self):
        self.invoke("create", "dev")
        (self.config_dir / "profiles" / "broken.json").write_text("{", encoding="utf-8")

        result = self.invoke("list", "--detail")
        assert result.exit_code == 0
        assert "dev" in result.output
        assert "broken" in result.output

    def test_detail(self):
        self.invoke("create", "dev")
        self.invoke("server", "add", "fs", "--to", "dev")

        result = self.invoke("detail", "dev")
        assert result.exit_code == 0
        assert '"template": "fs"' in result.output

    def test_detail_missing(self):
        result = self.invoke("detail", "missing")
        assert result.exit_code == 2

    def test_delete_requires_confirmation(self):
        self.invoke("create", "dev")

        result = self.invoke("delete", "dev")
        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert (self.config_dir / "profiles" / "dev.json").exists()

        result = self.invoke("delete", "dev", "--force")
        assert result.exit_code == 0
        assert not (self.config_dir / "profiles" / "dev.json").exists()

    def test_rename(self):
        self.invoke("create", "old")
        result = self.invoke("rename", "old", "new")

        assert result.exit_code == 0
        assert self.profile_data("new")["name"] == "new"
        assert not (self.config_dir / "profiles" / "old.json").exists()

    def test_rename_from_default_profile(self):
        self.invoke("create")
        result = self.invoke("rename", "renamed")

        assert result.exit_code == 0
        assert self.profile_data("renamed")["name"] == "renamed"

    def test_rename_too_many_names(self):
        result = self.invoke("rename", "a", "b", "c")
        assert result.exit_code == 7

    def test_copy_existing(self):
        self.invoke("create", "src")
        self.invoke("create", "dest")

        result = self.invoke("copy", "src", "dest")
        assert result.exit_code == 2

        result = self.invoke("copy", "src", "dest", "--force")
        assert result.exit_code == 0

    def test_merge(self):
        self.invoke("create", "a")
        self.invoke("create", "b")
        self.invoke("server", "add", "t-a", "--to", "a", "--as", "x")
        self.invoke("server", "add", "t-b", "--to", "b", "--as", "x")
        self.invoke("server", "add", "t-y", "--to", "b", "--as", "y")

        result = self.invoke("merge", "ab", "a", "b")
        assert result.exit_code == 0

        servers = self.profile_data("ab")["servers"]
        assert servers == [{"name": "x", "template": "t-a"}, {"name": "y", "template": "t-y"}]

    def test_merge_without_sources(self):
        result = self.invoke("merge", "ab")
        assert result.exit_code == 7

    def test_merge_missing_source(self):
        result = self.invoke("merge", "ab", "missing")
        assert result.exit_code == 2

    def test_path(self):
        self.invoke("create", "dev")
        result = self.invoke("path", "dev")

        assert result.exit_code == 0
        expected = (self.config_dir / "profiles" / "dev.json").resolve()
        assert result.output.strip() == str(expected)

    def test_path_missing(self):
        result = self.invoke("path", "missing")
        assert result.exit_code == 2

    def test_delete_cannot_reach_outside_config_dir(self):
        victim = self.tmp_path / "victim.json"
        victim.write_text("{}", encoding="utf-8")

        result = self.invoke("delete", "../../victim", "--force")
        assert result.exit_code == 7
        assert victim.exists()

    @pytest.mark.parametrize("args", [
        ["detail", "../x"],
        ["path", "../x"],
        ["apply", "../x", "--dry-run"],
        ["rename", "../x", "y"],
    ])
    def test_invalid_profile_names_rejected(self, args):
        result = self.invoke(*args)
        assert result.exit_code == 7


class TestApplyAndSave(CLITestBase):
    """Test applying profiles and saving MCP configuration files."""

    def _setup_profile(self):
        self.invoke("server", "save", "fs", "--command", "npx", "--args=-y,server-fs",
                    "--env", "ROOT=/tmp,MODE=ro")
        self.invoke("create", "dev")
        self.invoke("server", "add", "fs", "--to", "dev", "--env", "MODE=rw")

    def test_apply(self):
        self._setup_profile()
        target = self.tmp_path / "out" / "mcp.json"

        result = self.invoke("apply", "dev", "--path", str(target))
        assert result.exit_code == 0

        data = json.loads(target.read_text(encoding="utf-8"))
        assert data == {"mcpServers": {"fs": {
            "command": "npx",
            "args": ["-y", "server-fs"],
            "env": {"ROOT": "/tmp", "MODE": "rw"},
        }}}

    def test_apply_default_target(self):
        self._setup_profile()
        result = self.invoke("apply", "dev")

        assert result.exit_code == 0
        assert "fs" in json.loads((self.tmp_path / "home" / ".mcp.json").read_text())["mcpServers"]

    def test_apply_missing_template(self):
        self.invoke("create", "dev")
        self.invoke("server", "add", "gone", "--to", "dev")
        target = self.tmp_path / "mcp.json"

        result = self.invoke("apply", "dev", "--path", str(target))
        assert result.exit_code == 8
        assert not target.exists()

    def test_apply_missing_profile(self):
        result = self.invoke("apply", "missing", "--path", str(self.tmp_path / "mcp.json"))
        assert result.exit_code == 2

    def test_apply_dry_run(self):
        self._setup_profile()
        self.invoke("server", "add", "gone", "--to", "dev")
        target = self.tmp_path / "mcp.json"

        result = self.invoke("apply", "dev", "--path", str(target), "--dry-run")
        assert result.exit_code == 0
        assert '"mcpServers"' in result.output
        assert "gone" in result.output
        assert not target.exists()

    def test_save_from_file(self, mcp_config_file):
        result = self.invoke("save", "work", "--from", str(mcp_config_file))
        assert result.exit_code == 0

        assert [s["name"] for s in self.profile_data("work")["servers"]] == [
            "filesystem", "github",
        ]
        assert self.template_data("github")["serverConfig"]["env"] == {"GITHUB_TOKEN": "token"}

    def test_save_existing_profile(self, mcp_config_file):
        self.invoke("create", "work")

        result = self.invoke("save", "work", "--from", str(mcp_config_file))
        assert result.exit_code == 2

        result = self.invoke("save", "work", "--from", str(mcp_config_file), "--force")
        assert result.exit_code == 0

    def test_save_missing_file(self):
        result = self.invoke("save", "work", "--from", str(self.tmp_path / "none.json"))
        assert result.exit_code == 3

    def test_save_malformed_file(self):
        bad = self.tmp_path / "bad.json"
        bad.write_text("{oops", encoding="utf-8")

        result = self.invoke("save", "work", "--from", str(bad))
        assert result.exit_code == 4


class TestServerCommands(CLITestBase):
    """Test the server command group."""

    def test_save_and_detail(self):
        result = self.invoke("server", "save", "fs", "-c", "npx", "-a", "a,b", "-e", "K=V")
        assert result.exit_code == 0
        assert "Created server template 'fs'" in result.output

        config = self.template_data("fs")["serverConfig"]
        assert config == {"command": "npx", "args": ["a", "b"], "env": {"K": "V"}}

        result = self.invoke("server", "detail", "fs")
        assert result.exit_code == 0
        assert '"command": "npx"' in result.output

    def test_save_requires_command(self):
        result = self.invoke("server", "save", "fs")
        assert result.exit_code == 7

    def test_save_existing_declined(self):
        self.invoke("server", "save", "fs", "-c", "npx")

        result = self.invoke("server", "save", "fs", "-c", "node")
        assert result.exit_code == 1
        assert self.template_data("fs")["serverConfig"]["command"] == "npx"

    def test_update_clears_args(self):
        self.invoke("server", "save", "fs", "-c", "npx", "-a", "a,b")

        result = self.invoke("server", "save", "fs", "--args", "", "--force")
        assert result.exit_code == 0
        assert "args" not in self.template_data("fs")["serverConfig"]

    def test_update_without_args_keeps_them(self):
        self.invoke("server", "save", "fs", "-c", "npx", "-a", "a,b")

        result = self.invoke("server", "save", "fs", "-c", "node", "--force")
        assert result.exit_code == 0
        assert self.template_data("fs")["serverConfig"]["args"] == ["a", "b"]

    def test_save_invalid_env(self):
        result = self.invoke("server", "save", "fs", "-c", "npx", "-e", "1BAD=x")
        assert result.exit_code == 7

    def test_save_with_env_file(self):
        env_file = self.tmp_path / ".env"
        env_file.write_text("A=file\nB=file\n", encoding="utf-8")

        result = self.invoke("server", "save", "fs", "-c", "npx", "--env-file", str(env_file),
                             "-e", "B=option")
        assert result.exit_code == 0
        assert self.template_data("fs")["serverConfig"]["env"] == {"A": "file", "B": "option"}

    def test_save_from_mcp_config(self, mcp_config_file):
        result = self.invoke("server", "save", "gh", "--from", str(mcp_config_file),
                             "--server", "github")
        assert result.exit_code == 0
        assert self.template_data("gh")["serverConfig"]["command"] == "npx"

    def test_save_from_mcp_config_unknown_server(self, mcp_config_file):
        result = self.invoke("server", "save", "gh", "--from", str(mcp_config_file))
        assert result.exit_code == 2

    def test_list(self):
        self.invoke("server", "save", "fs", "-c", "npx")
        result = self.invoke("server", "list", "--detail")

        assert result.exit_code == 0
        assert "fs" in result.output
        assert "npx" in result.output

    def test_show(self, mcp_config_file):
        result = self.invoke("server", "show", "--from", str(mcp_config_file))
        assert result.exit_code == 0
        assert "filesystem" in result.output
        assert "github" in result.output

        result = self.invoke("server", "show", "github", "--from", str(mcp_config_file))
        assert result.exit_code == 0
        assert "GITHUB_TOKEN" in result.output

        result = self.invoke("server", "show", "missing", "--from", str(mcp_config_file))
        assert result.exit_code == 2

    def test_delete_force_strips_references(self):
        self.invoke("server", "save", "fs", "-c", "npx")
        self.invoke("create", "dev")
        self.invoke("server", "add", "fs", "--to", "dev")

        result = self.invoke("server", "delete", "fs", "--force")
        assert result.exit_code == 0
        assert "dev" in result.output
        assert not (self.config_dir / "servers" / "fs.json").exists()
        assert self.profile_data("dev")["servers"] == []

    def test_delete_declined(self):
        self.invoke("server", "save", "fs", "-c", "npx")

        result = self.invoke("server", "delete", "fs")
        assert result.exit_code == 0
        assert (self.config_dir / "servers" / "fs.json").exists()

    def test_rename_and_copy(self):
        self.invoke("server", "save", "fs", "-c", "npx")

        assert self.invoke("server", "copy", "fs", "fs2").exit_code == 0
        assert self.invoke("server", "copy", "fs", "fs2").exit_code == 2
        assert self.invoke("server", "rename", "fs", "files").exit_code == 0
        assert self.invoke("server", "rename", "fs", "other").exit_code == 2
        assert self.invoke("server", "rename", "files", "files").exit_code == 7

        assert self.template_data("files")["name"] == "files"
        assert self.template_data("fs2")["name"] == "fs2"

    def test_path(self):
        self.invoke("server", "save", "fs", "-c", "npx")
        result = self.invoke("server", "path", "fs")

        assert result.exit_code == 0
        assert result.output.strip() == str((self.config_dir / "servers" / "fs.json").resolve())

    def test_add_and_remove(self):
        self.invoke("create", "dev")

        result = self.invoke("server", "add", "fs", "--to", "dev", "--as", "files",
                             "--env", "A=1")
        assert result.exit_code == 0
        assert "does not exist yet" in result.output
        assert self.profile_data("dev")["servers"] == [
            {"name": "files", "template": "fs", "overrides": {"env": {"A": "1"}}}
        ]

        assert self.invoke("server", "add", "fs", "--to", "dev", "--as", "files").exit_code == 2

        result = self.invoke("server", "remove", "files", "--from", "dev")
        assert result.exit_code == 0
        assert self.profile_data("dev")["servers"] == []

        assert self.invoke("server", "remove", "files", "--from", "dev").exit_code == 2

    def test_add_rejects_invalid_names(self):
        self.invoke("create", "dev")

        result = self.invoke("server", "add", "../../x y", "--to", "dev")
        assert result.exit_code == 7
        assert self.profile_data("dev")["servers"] == []

        result = self.invoke("server", "add", "fs", "--to", "dev", "--as", "../fs")
        assert result.exit_code == 7
        assert self.profile_data("dev")["servers"] == []

    @pytest.mark.parametrize("args", [
        ["server", "detail", "../x"],
        ["server", "path", "../x"],
        ["server", "delete", "../../victim", "--force"],
        ["server", "remove", "../x", "--from", "dev"],
    ])
    def test_invalid_server_names_rejected(self, args):
        victim = self.tmp_path / "victim.json"
        victim.write_text("{}", encoding="utf-8")

        result = self.invoke(*args)
        assert result.exit_code == 7
        assert victim.exists()

    def test_from_path_expands_home(self):
        servers = {"mcpServers": {"gh": {"command": "npx", "args": ["server-github"]}}}
        (self.tmp_path / "home" / "servers.json").write_text(json.dumps(servers), encoding="utf-8")

        result = self.invoke("server", "show", "--from", "~/servers.json")
        assert result.exit_code == 0
        assert "gh" in result.output

        result = self.invoke("server", "save", "gh", "--from", "~/servers.json")
        assert result.exit_code == 0
        assert self.template_data("gh")["serverConfig"]["command"] == "npx"


class TestResetCommands(CLITestBase):
    """Test the reset command group."""

    def _populate(self):
        self.invoke("server", "save", "fs", "-c", "npx")
        self.invoke("create", "dev")

    def test_reset_declined(self):
        self._populate()

        result = self.invoke("reset", "all")
        assert result.exit_code == 0
        assert (self.config_dir / "servers" / "fs.json").exists()
        assert (self.config_dir / "profiles" / "dev.json").exists()

    def test_reset_profiles(self):
        self._populate()

        result = self.invoke("reset", "profiles", "--force")
        assert result.exit_code == 0
        assert not (self.config_dir / "profiles" / "dev.json").exists()
        assert (self.config_dir / "servers" / "fs.json").exists()

    def test_reset_servers(self):
        self._populate()

        result = self.invoke("reset", "servers", "--force")
        assert result.exit_code == 0
        assert not (self.config_dir / "servers" / "fs.json").exists()

    def test_reset_all(self):
        self._populate()

        result = self.invoke("reset", "all", "--force")
        assert result.exit_code == 0
        assert list((self.config_dir / "servers").iterdir()) == []
        assert list((self.config_dir / "profiles").iterdir()) == []
