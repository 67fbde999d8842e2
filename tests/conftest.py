"""Shared pytest fixtures for the workbench test suite."""
from __future__ import annotations

from typing import Any, Dict, Mapping

import pytest

from session.settings import WorkbenchConfig, config_from_mapping


def build_config(toolboxes: Mapping[str, Mapping[str, Any]]) -> WorkbenchConfig:
    """Build a config from ``{toolbox: {server: server_entry}}``.

    A toolbox value may instead be a full toolbox entry when it carries a
    ``servers`` key, which allows setting ``description`` and
    ``require_all_servers``.
    """

    document: Dict[str, Any] = {"toolboxes": {}}
    for name, value in toolboxes.items():
        if "servers" in value:
            document["toolboxes"][name] = dict(value)
        else:
            document["toolboxes"][name] = {"description": f"{name} tools", "servers": dict(value)}
    return config_from_mapping(document)


@pytest.fixture
def make_config():
    """Return the ``build_config`` helper."""
    return build_config
