#!/usr/bin/env python3
"""
Tests for the command-line entry point.
"""

import json

import httpx
import pytest

from chatstream import main as cli
from chatstream.llm.client import ChatCompletionsClient

ENDPOINT = "https://llm.test/v1/chat/completions"


def install_client(monkeypatch, handler, seen_overrides: list):
    def fake_from_configuration(cls, config, **overrides):
        seen_overrides.append(overrides)
        return cls(
            "sk-test",
            endpoint=ENDPOINT,
            transport=httpx.MockTransport(handler),
            **overrides,
        )

    monkeypatch.setattr(
        ChatCompletionsClient, "from_configuration", classmethod(fake_from_configuration)
    )


def event_stream(*texts: str, status_code: int = 200):
    async def handler(request: httpx.Request) -> httpx.Response:
        async def body():
            for text in texts:
                payload = {"choices": [{"delta": {"content": text}}]}
                yield f"data: {json.dumps(payload)}\n\n".encode()
            yield b"data: [DONE]\n\n"

        return httpx.Response(
            status_code, headers={"content-type": "text/event-stream"}, content=body()
        )
    return handler


def test_parse_args_defaults():
    args = cli.parse_args(["Hello"])
    assert args.prompt == "Hello"
    assert args.model is None
    assert args.temperature is None


@pytest.mark.asyncio
async def test_main_prints_reply(monkeypatch, capsys):
    overrides: list = []
    install_client(monkeypatch, event_stream("Hi", " there"), overrides)

    exit_code = await cli.main(["Hello", "--model", "gpt-4o", "--temperature", "0.2"])

    assert exit_code == 0
    assert capsys.readouterr().out == "Hi there\n"
    assert overrides == [{"model": "gpt-4o", "temperature": 0.2}]


@pytest.mark.asyncio
async def test_main_reports_failure(monkeypatch, capsys):
    install_client(monkeypatch, event_stream(status_code=500), [])

    exit_code = await cli.main(["Hello"])

    assert exit_code == 1
    assert "API Error – Status Code: 500" in capsys.readouterr().err
