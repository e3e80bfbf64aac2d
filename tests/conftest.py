import json
import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure project root is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from hi_gcloud.core.config import Config
from hi_gcloud.core.logger import setup_logger
from hi_gcloud.core.models import ExecResult
from hi_gcloud.core.project_config import ProjectConfigStore
from hi_gcloud.core.resolver import ParameterResolver
from hi_gcloud.providers.gcp.auth import GcloudAuth
from hi_gcloud.tools.base import ToolContext


# --- ENVIRONMENT ---

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own settings out of the tests."""
    for key in list(os.environ):
        if key.startswith("HI_GCLOUD_"):
            monkeypatch.delenv(key)
    monkeypatch.delenv("MCP_TRANSPORT", raising=False)
    monkeypatch.setenv("HI_GCLOUD_MCP_MODE", "true")


# --- FIXTURES ---

@pytest.fixture
def workdir(tmp_path):
    return tmp_path


@pytest.fixture
def config(workdir):
    config = Config(workdir=str(workdir))
    config.gcloud_path = "gcloud"
    return config


@pytest.fixture
def logger():
    return setup_logger("hi_gcloud_test", "DEBUG")


@pytest.fixture
def store(config, logger):
    return ProjectConfigStore(config, logger)


@pytest.fixture
def gcloud_values():
    """Values the fake gcloud reports for ``config get-value``."""
    return {"project": None, "compute/region": None}


@pytest.fixture
def fake_client(gcloud_values):
    """Stand-in for GcloudClient; no subprocess is ever started."""
    client = MagicMock()
    client.locate = AsyncMock(return_value="gcloud")
    client.execute = AsyncMock(return_value=ExecResult(stdout="user@example.com\n"))
    client.execute_json = AsyncMock(return_value=[])
    client.get_value = AsyncMock(side_effect=lambda key: gcloud_values.get(key))
    return client


@pytest.fixture
def ctx(config, logger, store, fake_client):
    return ToolContext(
        config=config,
        logger=logger,
        store=store,
        client=fake_client,
        auth=GcloudAuth(fake_client, logger),
        resolver=ParameterResolver(store, fake_client, logger),
    )


@pytest.fixture
def write_config(workdir):
    """Write raw content (dict -> JSON, str -> as is) to .hi-gcloud.json."""

    def _write(content, directory=None):
        path = (directory or workdir) / ".hi-gcloud.json"
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
