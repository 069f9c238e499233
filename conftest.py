"""Shared test configuration: import path and a minimal ``discord`` stand-in."""

import os
import sys
import types

import pytest

# Add the repository root (the directory containing this file) to ``sys.path``
# so ``visit_bot`` imports without installing the project first.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Modules that bind ``discord`` at import time and must be re-imported once
# the stub is installed.
_DISCORD_BOUND = (
    "visit_bot.ui.modals",
    "visit_bot.ui.views",
    "visit_bot.commands.utils",
    "visit_bot.commands.register",
    "visit_bot.bot",
    "visit_bot.main",
)


@pytest.fixture
def discord_stub(monkeypatch):
    """Install just enough of ``discord`` for the UI and command modules."""
    discord = types.ModuleType("discord")

    class HTTPException(Exception):
        pass
    discord.HTTPException = HTTPException

    class Embed:
        def __init__(self, title=None, description=None, **kwargs):
            self.title = title
            self.description = description
            self.fields = []
            self.footer = None
        def add_field(self, *, name, value, inline=True):
            self.fields.append((name, value))
        def set_footer(self, *, text=None, **kwargs):
            self.footer = text
    discord.Embed = Embed

    class SelectOption:
        def __init__(self, label, value):
            self.label = label
            self.value = value
    discord.SelectOption = SelectOption

    class ButtonStyle:
        success = 1
        primary = 2
        danger = 3
        secondary = 4
    discord.ButtonStyle = ButtonStyle

    class TextStyle:
        short = 1
        long = 2
    discord.TextStyle = TextStyle

    ui = types.ModuleType("discord.ui")

    class TextInput:
        def __init__(self, *args, default=None, **kwargs):
            self.label = kwargs.get("label")
            self.required = kwargs.get("required", True)
            self.default = default
            self.value = default or ""
    ui.TextInput = TextInput

    class Modal:
        def __init__(self, *args, **kwargs):
            self.title = kwargs.get("title")
            self.children = []
        def add_item(self, item):
            self.children.append(item)
        def __init_subclass__(cls, **kwargs):
            pass
    ui.Modal = Modal

    class View:
        def __init__(self, *args, **kwargs):
            self.children = []
        def add_item(self, item):
            self.children.append(item)
    ui.View = View

    class Select:
        def __init__(self, *_, **kwargs):
            self.options = kwargs.get("options", [])
            self.values = []
            self.callback = None
    ui.Select = Select

    class Button:
        def __init__(self, *args, **kwargs):
            pass
    ui.Button = Button

    def button(**_kwargs):
        def decorator(func):
            return func
        return decorator
    ui.button = button
    discord.ui = ui

    class Choice:
        def __init__(self, name, value):
            self.name = name
            self.value = value

    def describe(**_kwargs):
        def decorator(func):
            return func
        return decorator
    discord.app_commands = types.SimpleNamespace(Choice=Choice, describe=describe)

    def utils_get(seq, **attrs):
        for item in seq:
            if all(getattr(item, k, None) == v for k, v in attrs.items()):
                return item
        return None
    discord.utils = types.SimpleNamespace(get=utils_get)

    ext = types.ModuleType("discord.ext")
    ext.commands = types.SimpleNamespace(Bot=object)
    discord.ext = ext

    monkeypatch.setitem(sys.modules, "discord", discord)
    monkeypatch.setitem(sys.modules, "discord.ui", ui)
    monkeypatch.setitem(sys.modules, "discord.ext", ext)
    for name in _DISCORD_BOUND:
        monkeypatch.delitem(sys.modules, name, raising=False)
    return discord


@pytest.fixture
def make_interaction():
    """Factory for fake interactions recording what the bot replied."""

    class Response:
        def __init__(self):
            self.messages = []
            self.modals = []
        async def send_message(self, content=None, **kwargs):
            self.messages.append((content, kwargs))
        async def send_modal(self, modal):
            self.modals.append(modal)

    def factory(user_id=1, guild=None):
        return types.SimpleNamespace(
            user=types.SimpleNamespace(id=user_id),
            response=Response(),
            guild=guild,
        )

    return factory
