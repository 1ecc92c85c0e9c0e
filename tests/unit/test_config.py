"""Unit tests for router configuration models and loading."""

import json

import pytest

from relay_router.config.loader import config_from_dict, interpolate_env_vars, load_router_config
from relay_router.config.models import ProviderConfig, RouterConfig
from relay_router.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "RELAY_ROUTER_CONFIG",
        "RELAY_ROUTER_LONG_CONTEXT_THRESHOLD",
        "RELAY_ROUTER_CUSTOM_ROUTER_PATH",
        "RELAY_ROUTER_CUSTOM_ROUTER_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def proxy_config():
    """Config file contents in the proxy's layout."""
    return {
        "Providers": [
            {
                "name": "openai",
                "api_base_url": "https://api.openai.com/v1/chat/completions",
                "api_key": "$OPENAI_API_KEY",
                "models": ["gpt-4o", "gpt-4o-mini"],
            },
            {
                "name": "openai-responses",
                "api_base_url": "https://api.openai.com/v1/responses",
                "models": ["o3"],
                "transformer": {"use": ["responses-api"]},
            },
        ],
        "Router": {
            "default": "openai,gpt-4o",
            "background": "openai,gpt-4o-mini",
            "think": "openai-responses,o3",
            "longContextThreshold": 32000,
        },
    }


class TestRouterConfig:
    def test_defaults(self):
        config = RouterConfig()
        assert config.long_context_threshold == 60000
        assert config.custom_router_path is None
        assert config.subagent_tag == "ROUTE"
        assert config.lightweight_markers == ("haiku",)

    def test_route_resolution(self):
        config = RouterConfig(routes={"default": " openai , gpt-4o ", "think": "bad", "x": ","})
        assert config.route("default") == ("openai", "gpt-4o")
        assert config.route("think") is None
        assert config.route("x") is None
        assert config.route("missing") is None

    def test_non_string_routes_are_dropped(self):
        config = RouterConfig(routes={"default": "a,b", "longContextThreshold": 100, "image": None})
        assert config.routes == {"default": "a,b"}

    def test_frozen(self):
        config = RouterConfig()
        with pytest.raises(Exception):
            config.long_context_threshold = 1

    def test_negative_threshold_rejected(self):
        with pytest.raises(Exception):
            RouterConfig(long_context_threshold=-1)


class TestProviderConfig:
    @pytest.mark.parametrize("transformer,expected", [
        ({"use": ["responses-api"]}, ("responses-api",)),
        ({"use": ["openrouter", ["maxtoken", {"max_tokens": 16384}]]}, ("openrouter", "maxtoken")),
        (["deepseek"], ("deepseek",)),
        ("gemini", ("gemini",)),
        (None, ()),
    ])
    def test_transformer_names(self, transformer, expected):
        provider = ProviderConfig(name="p", transformer=transformer)
        assert provider.transformer == expected

    def test_strict_by_transformer(self):
        provider = ProviderConfig(name="p", transformer={"use": ["responses-api"]})
        assert provider.requires_strict_content is True

    def test_strict_by_url(self):
        provider = ProviderConfig(name="p", api_base_url="https://api.openai.com/v1/responses/")
        assert provider.requires_strict_content is True

    def test_chat_completions_not_strict(self):
        provider = ProviderConfig(name="p", api_base_url="https://api.openai.com/v1/chat/completions")
        assert provider.requires_strict_content is False

    def test_unknown_provider_not_strict(self, strict_router_config):
        assert strict_router_config.requires_strict_content("openai") is True
        assert strict_router_config.requires_strict_content("gemini") is False
        assert strict_router_config.requires_strict_content("acme") is False


class TestConfigFromDict:
    def test_proxy_layout(self, proxy_config):
        config = config_from_dict(proxy_config)
        assert config.long_context_threshold == 32000
        assert "longContextThreshold" not in config.routes
        assert config.route("think") == ("openai-responses", "o3")
        assert config.requires_strict_content("openai-responses") is True
        assert config.requires_strict_content("openai") is False

    def test_custom_router_path_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        config = config_from_dict({"CUSTOM_ROUTER_PATH": "~/router.py"})
        assert config.custom_router_path == str(tmp_path / "router.py")

    def test_env_overrides(self, monkeypatch, proxy_config):
        monkeypatch.setenv("RELAY_ROUTER_LONG_CONTEXT_THRESHOLD", "1000")
        monkeypatch.setenv("RELAY_ROUTER_CUSTOM_ROUTER_TIMEOUT", "2.5")
        config = config_from_dict(proxy_config)
        assert config.long_context_threshold == 1000
        assert config.custom_router_timeout == 2.5

    def test_invalid_values_raise_config_error(self):
        with pytest.raises(ConfigError, match="Invalid router configuration"):
            config_from_dict({"Router": {"longContextThreshold": "lots"}})

    def test_does_not_modify_input(self, proxy_config):
        config_from_dict(proxy_config)
        assert proxy_config["Router"]["longContextThreshold"] == 32000


class TestInterpolation:
    def test_both_reference_forms(self, monkeypatch):
        monkeypatch.setenv("RR_KEY", "secret")
        assert interpolate_env_vars("$RR_KEY") == "secret"
        assert interpolate_env_vars("Bearer ${RR_KEY}") == "Bearer secret"

    def test_unset_left_as_written(self, monkeypatch):
        monkeypatch.delenv("RR_UNSET", raising=False)
        assert interpolate_env_vars("$RR_UNSET") == "$RR_UNSET"

    def test_nested(self, monkeypatch):
        monkeypatch.setenv("RR_MODEL", "gpt-4o")
        value = {"Router": {"default": "openai,$RR_MODEL"}, "list": ["${RR_MODEL}", 3]}
        assert interpolate_env_vars(value) == {
            "Router": {"default": "openai,gpt-4o"},
            "list": ["gpt-4o", 3],
        }


class TestLoadRouterConfig:
    def test_load_file(self, tmp_path, proxy_config):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(proxy_config))
        config = load_router_config(path)
        assert config.route("default") == ("openai", "gpt-4o")

    def test_path_from_environment(self, monkeypatch, tmp_path, proxy_config):
        path = tmp_path / "env-config.json"
        path.write_text(json.dumps(proxy_config))
        monkeypatch.setenv("RELAY_ROUTER_CONFIG", str(path))
        assert load_router_config().long_context_threshold == 32000

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found") as exc_info:
            load_router_config(tmp_path / "nope.json")
        assert exc_info.value.path.endswith("nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Could not read config"):
            load_router_config(path)

    def test_non_object_root(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_router_config(path)
