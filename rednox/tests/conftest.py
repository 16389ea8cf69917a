"""Shared fixtures for the rednox test suite."""

import pytest

from rednox.config import CodecSettings
from rednox.diagnostics import Diagnostics


# shaped like the node-type service response
NODE_TYPES = [
    {
        "type": "http-in",
        "category": "network",
        "inputs": 0,
        "outputs": 1,
        "ui": {"icon": "🌐", "color": "#e7e7ae", "paletteLabel": "HTTP In", "description": "Entry route"},
        "defaults": {"method": "get", "url": "/hello"},
    },
    {
        "type": "inject",
        "category": "common",
        "inputs": 0,
        "outputs": 1,
        "ui": {"icon": "💉", "color": "#a6bbcf"},
        "defaults": {"payload": "", "repeat": ""},
    },
    {
        "type": "switch",
        "category": "function",
        "inputs": 1,
        "outputs": 3,
        "ui": {"icon": "🔀", "color": "#e2d96e", "paletteLabel": "Switch"},
        "defaults": {"property": "payload", "rules": []},
    },
    {
        "type": "function",
        "category": "function",
        "inputs": 1,
        "outputs": 1,
        "ui": {"icon": "ƒ", "color": "#fdd0a2"},
        "defaults": {"func": "return msg;", "name": "function"},
    },
    {
        "type": "http-response",
        "category": "network",
        "inputs": 1,
        "outputs": 0,
        "ui": {"icon": "↩", "color": "#e7e7ae"},
        "defaults": {},
    },
]


@pytest.fixture
def catalog() -> list[dict]:
    return [dict(entry) for entry in NODE_TYPES]


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


@pytest.fixture
def settings() -> CodecSettings:
    return CodecSettings()


@pytest.fixture
def sample_flow() -> list[dict]:
    """http-in -> function -> switch -> (response | function) with a loop back."""
    return [
        {"id": "in1", "type": "http-in", "name": "hello", "x": 120, "y": 80,
         "method": "post", "url": "/hello", "wires": [["fn1"]]},
        {"id": "fn1", "type": "function", "name": "", "x": 300, "y": 80,
         "func": "msg.payload = 1; return msg;", "wires": [["sw1"]]},
        {"id": "sw1", "type": "switch", "name": "route", "x": 480, "y": 80,
         "rules": [{"t": "eq", "v": "a"}, {"t": "else"}],
         "options": {"checkall": True, "repair": False},
         "wires": [["out1"], ["fn1"], []]},
        {"id": "out1", "type": "http-response", "name": "", "x": 660, "y": 80,
         "statusCode": 200, "wires": []},
    ]
