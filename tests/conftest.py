"""Shared pytest fixtures for relay router tests."""

import pytest
from unittest.mock import patch

from relay_router.config.models import ProviderConfig, RouterConfig
from relay_router.core.estimation.tokens import TokenEstimator
from relay_router.core.routing.engine import RoutingEngine
from relay_router.models.messages import Message, Request, Role
from relay_router.pipeline import RequestPipeline


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end pipeline tests")


@pytest.fixture
def routes():
    """Route table covering every named route."""
    return {
        "default": "openai,gpt-4o",
        "background": "openai,gpt-4o-mini",
        "think": "openai,o3-mini",
        "longContext": "gemini,gemini-1.5-pro",
        "webSearch": "openai,gpt-4o-search-preview",
    }


@pytest.fixture
def router_config(routes):
    """Router config with all routes and the standard threshold."""
    return RouterConfig(routes=routes, long_context_threshold=60000)


@pytest.fixture
def strict_router_config(routes):
    """Router config whose openai provider requires block-typed content."""
    return RouterConfig(
        routes=routes,
        long_context_threshold=60000,
        providers=[
            ProviderConfig(
                name="openai",
                api_base_url="https://api.openai.com/v1/responses",
                models=["gpt-4o", "o3-mini"],
                transformer={"use": ["responses-api"]},
            ),
            ProviderConfig(
                name="gemini",
                api_base_url="https://generativelanguage.googleapis.com/v1beta/models/",
                models=["gemini-1.5-pro"],
            ),
        ],
    )


@pytest.fixture(autouse=True)
def no_tokenizer_download():
    """Keep tests off the network: tiktoken vocabularies are downloaded on first use."""
    with patch(
        "relay_router.core.estimation.tokens.tiktoken.get_encoding",
        side_effect=RuntimeError("vocabulary download disabled"),
    ) as mock_get_encoding:
        yield mock_get_encoding


@pytest.fixture
def offline_estimator(no_tokenizer_download):
    """Estimator that cannot load the tokenizer vocabulary."""
    return TokenEstimator()


@pytest.fixture
def engine(offline_estimator):
    """Routing engine with deterministic token estimation."""
    return RoutingEngine(estimator=offline_estimator)


@pytest.fixture
def pipeline(engine):
    return RequestPipeline(engine=engine)


@pytest.fixture
def simple_request():
    """A single short user turn."""
    return Request(messages=[Message(role=Role.USER, content="hi")])


@pytest.fixture
def tool_conversation():
    """A conversation exercising tool calls and results in OpenAI wire form."""
    return Request.model_validate({
        "messages": [
            {"role": "system", "content": "You are a coding assistant."},
            {"role": "user", "content": "Find the config file"},
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": "call_1",
                        "type": "function",
                        "function": {"name": "search", "arguments": "{\"q\": \"config\"}"},
                    }
                ],
            },
            {"role": "tool", "tool_call_id": "call_1", "content": None},
            {"role": "user", "content": None},
        ],
        "tools": [
            {
                "type": "function",
                "function": {
                    "name": "search",
                    "description": "Search the workspace",
                    "parameters": {"type": "object", "properties": {"q": {"type": "string"}}},
                },
            }
        ],
    })
