import pytest

from errors import EnvExpansionError
from session.env import expand_env_vars, expand_string


def test_expands_required_and_default_references():
    env = {"HOME_DIR": "/home/dev", "EMPTY": ""}

    assert expand_string("${HOME_DIR}/data", "x", env) == "/home/dev/data"
    assert expand_string("${MISSING:-fallback}", "x", env) == "fallback"
    assert expand_string("${EMPTY:-fallback}", "x", env) == ""
    assert expand_string("plain text", "x", env) == "plain text"


def test_missing_required_variable_names_variable_and_location():
    with pytest.raises(EnvExpansionError) as excinfo:
        expand_string("${API_TOKEN}", "config.toolboxes.dev.servers.gh.env.TOKEN", {})

    assert excinfo.value.variable == "API_TOKEN"
    assert excinfo.value.location == "config.toolboxes.dev.servers.gh.env.TOKEN"


def test_unclosed_brace_is_rejected():
    with pytest.raises(EnvExpansionError, match="unclosed brace"):
        expand_string("prefix ${ROOT", "config.args[0]", {"ROOT": "/"})


def test_lowercase_names_are_left_untouched():
    assert expand_string("${lower}", "x", {"lower": "value"}) == "${lower}"


def test_recursive_expansion_preserves_structure_and_order():
    env = {"ROOT": "/srv", "NAME": "files"}
    document = {
        "toolboxes": {
            "${NAME}": {"servers": {"fs": {"command": "fs", "args": ["--root", "${ROOT}"], "port": 8080}}},
            "zeta": {},
        }
    }

    expanded = expand_env_vars(document, "config", env)

    assert list(expanded["toolboxes"]) == ["files", "zeta"]
    server = expanded["toolboxes"]["files"]["servers"]["fs"]
    assert server["args"] == ["--root", "/srv"]
    assert server["port"] == 8080


def test_list_locations_are_reported():
    with pytest.raises(EnvExpansionError) as excinfo:
        expand_env_vars({"args": ["ok", "${NOPE}"]}, "config", {})

    assert excinfo.value.location == "config.args[1]"


def test_trailing_unclosed_reference_is_kept_after_a_valid_one():
    assert expand_string("${A}-${", "x", {"A": "1"}) == "1-${"
