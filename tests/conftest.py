"""
Pytest configuration and fixtures for mcpjson testing.

Every test runs with HOME and the working directory pointed at a
temporary directory so that no user configuration is read or written.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict

import pytest

from mcpjson.core.profiles import ProfileStore
from mcpjson.core.templates import TemplateStore
from mcpjson.utils.interaction import StaticConfirmer


SAMPLE_MCP_CONFIG: Dict[str, Any] = {
    "mcpServers": {
        "filesystem": {
            "command": "npx",
            "args": ["-y", "@modelcontextprotocol/server-filesystem", "/tmp"],
        },
        "github": {
            "command": "npx",
            "args": ["-y", "@modelcontextprotocol/server-github"],
            "env": {"GITHUB_TOKEN": "token"},
        },
    }
}


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Isolate HOME, the working directory and MCPJSON_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)

    for key in list(os.environ):
        if key.upper().startswith("MCPJSON_"):
            monkeypatch.delenv(key, raising=False)

    return tmp_path


@pytest.fixture
def temp_config_dir(tmp_path) -> Path:
    """Configuration directory holding profiles/ and servers/."""
    config_dir = tmp_path / "mcpjson"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def confirmer() -> StaticConfirmer:
    """Confirmer that declines every prompt."""
    return StaticConfirmer(False)


@pytest.fixture
def template_store(temp_config_dir, confirmer) -> TemplateStore:
    return TemplateStore(temp_config_dir / "servers", confirmer)


@pytest.fixture
def profile_store(temp_config_dir, confirmer) -> ProfileStore:
    return ProfileStore(temp_config_dir / "profiles", confirmer)


@pytest.fixture
def mcp_config_file(tmp_path) -> Path:
    """MCP configuration file with two servers."""
    path = tmp_path / "mcp.json"
    path.write_text(json.dumps(SAMPLE_MCP_CONFIG), encoding="utf-8")
    return path
