"""
Tests for the command registry: groups, validation, loading and reloading.
"""

import logging

import pytest

from bandleader.commands import BUILTIN_COMMANDS
from bandleader.commands.command_enums import ArgumentType
from bandleader.commands.registry import (
    BUILTIN_GROUP, ArgumentDefinition, CommandRegistry, RegistrationError, validate_command
)
from bandleader.commands.slash_commands import validate_slash_command
from bandleader.model.permissions import BOT_OWNER, GUILD_OWNER, flags
from tests.fixtures.command_testing import make_command


def rest_arg(name="text"):
    return ArgumentDefinition(name, "Rest of the message", ArgumentType.STRING, optional=True, rest=True)


def plain_arg(name="word", type=ArgumentType.STRING, **kwargs):
    return ArgumentDefinition(name, "A word", type, **kwargs)


def discover_from(mapping):
    """A discover callable returning the commands listed for each group."""
    return lambda group: mapping.get(group, [])


class TestGroups:

    def test_builtin_group_always_present(self):
        registry = CommandRegistry(BUILTIN_COMMANDS)
        assert BUILTIN_GROUP in registry.groups
        assert {command.name for command in registry.commands_in_group(BUILTIN_GROUP)} == {"help", "reload"}

    def test_reserved_builtin_name_is_rejected(self, caplog):
        registry = CommandRegistry(BUILTIN_COMMANDS)
        with caplog.at_level(logging.ERROR, logger="bandleader"):
            registry.register_groups([("builtin", "Hijacked"), ("fun", "Fun commands")])
        assert registry.groups[BUILTIN_GROUP] == "Built-in commands"
        assert registry.groups["fun"] == "Fun commands"
        assert "reserved" in caplog.text
        registry.load(discover_from({}))
        assert {command.name for command in registry.commands_in_group(BUILTIN_GROUP)} == {"help", "reload"}

    @pytest.mark.parametrize("group", [("", "No name"), ("noname", ""), ("single",)])
    def test_incomplete_groups_are_skipped(self, group):
        registry = CommandRegistry()
        registry.register_groups([group])
        assert list(registry.groups) == [BUILTIN_GROUP]

    def test_sorted_groups_puts_builtin_last(self):
        registry = CommandRegistry()
        registry.register_groups([("zeta", "Z"), ("Alpha", "A"), ("mid", "M")])
        assert registry.sorted_groups() == ["Alpha", "mid", "zeta", BUILTIN_GROUP]


class TestValidation:

    def test_valid_rest_argument(self):
        validate_command(make_command(arguments=[plain_arg(), rest_arg()]))

    def test_two_rest_arguments_rejected(self):
        with pytest.raises(RegistrationError, match="more than one rest argument"):
            validate_command(make_command(arguments=[rest_arg("a"), rest_arg("b")]))

    def test_non_last_rest_argument_rejected(self):
        with pytest.raises(RegistrationError, match="non-last rest argument"):
            validate_command(make_command(arguments=[rest_arg(), plain_arg()]))

    def test_rest_argument_must_be_a_string(self):
        with pytest.raises(RegistrationError):
            validate_command(make_command(arguments=[plain_arg(type=ArgumentType.NUMBER, rest=True)]))

    def test_one_of_only_on_strings_and_numbers(self):
        validate_command(make_command(arguments=[plain_arg(type=ArgumentType.NUMBER, one_of=(1, 2))]))
        with pytest.raises(RegistrationError):
            validate_command(make_command(arguments=[plain_arg(type=ArgumentType.BOOLEAN, one_of=(True,))]))

    @pytest.mark.parametrize("requirement", [BOT_OWNER, GUILD_OWNER, flags("manage_messages"), None])
    def test_known_user_requirements(self, requirement):
        validate_command(make_command(user_permissions=requirement, bot_permissions=flags("send_messages")))

    @pytest.mark.parametrize("permissions", [
        dict(user_permissions="BOT_OWNER"),
        dict(user_permissions={"manage_messages"}),
        dict(bot_permissions=BOT_OWNER),
        dict(bot_permissions="manage_messages"),
    ])
    def test_unknown_permission_requirements_rejected(self, permissions):
        with pytest.raises(RegistrationError):
            validate_command(make_command(**permissions))


class TestLoad:

    def setup_method(self):
        self.registry = CommandRegistry(BUILTIN_COMMANDS)
        self.registry.register_groups([("fun", "Fun commands"), ("admin", "Admin commands")])

    def test_commands_are_tagged_with_their_group(self):
        self.registry.load(discover_from({"fun": [make_command("joke")], "admin": [make_command("ban")]}))
        assert self.registry.get("joke").group == "fun"
        assert self.registry.get("ban").group == "admin"
        assert self.registry.get("help").group == BUILTIN_GROUP

    def test_two_rest_arguments_add_nothing(self):
        bad = make_command("bad", arguments=[rest_arg("a"), rest_arg("b")])
        self.registry.load(discover_from({"fun": [bad]}))
        assert "bad" not in self.registry
        assert len(self.registry) == len(BUILTIN_COMMANDS)

    def test_non_last_rest_argument_is_skipped(self):
        bad = make_command("bad", arguments=[rest_arg(), plain_arg()])
        self.registry.load(discover_from({"fun": [bad, make_command("good")]}))
        assert "bad" not in self.registry
        assert "good" in self.registry

    def test_duplicate_name_keeps_the_first(self, caplog):
        first = make_command("joke", description="first")
        second = make_command("joke", description="second")
        with caplog.at_level(logging.ERROR, logger="bandleader"):
            self.registry.load(discover_from({"fun": [first], "admin": [second]}))
        assert self.registry.get("joke").description == "first"
        assert self.registry.get("joke").group == "fun"
        assert "registered twice" in caplog.text

    def test_malformed_permissions_are_skipped(self, caplog):
        owner_string = make_command("shutdown", user_permissions="BOT_OWNER")
        owner_as_bot = make_command("purge", bot_permissions=BOT_OWNER)
        with caplog.at_level(logging.ERROR, logger="bandleader"):
            self.registry.load(discover_from({"fun": [owner_string, owner_as_bot, make_command("joke")]}))
        assert "shutdown" not in self.registry
        assert "purge" not in self.registry
        assert "joke" in self.registry
        assert "unknown user permission requirement" in caplog.text

    def test_builtins_win_over_discovered_commands(self):
        self.registry.load(discover_from({"fun": [make_command("help", description="impostor")]}))
        assert self.registry.get("help").group == BUILTIN_GROUP
        assert self.registry.get("help").description != "impostor"

    def test_reload_adds_and_removes_commands(self):
        on_disk = {"fun": [make_command("joke")]}
        self.registry.load(discover_from(on_disk))
        assert "joke" in self.registry

        on_disk["fun"] = [make_command("pun")]
        self.registry.load(discover_from(on_disk))
        assert "pun" in self.registry
        assert "joke" not in self.registry

    def test_reload_replaces_the_map_instead_of_mutating_it(self):
        self.registry.load(discover_from({"fun": [make_command("joke")]}))
        before = self.registry.commands
        self.registry.load(discover_from({}))
        assert "joke" in before
        assert "joke" not in self.registry.commands

    def test_builtin_group_is_not_discovered(self):
        discovered = []
        self.registry.load(lambda group: discovered.append(group) or [])
        assert discovered == ["fun", "admin"]


class TestRegister:

    def test_register_into_group(self):
        registry = CommandRegistry()
        registry.register_groups([("fun", "Fun commands")])
        command = registry.register(make_command("joke"), "fun")
        assert command.group == "fun"
        assert registry.get("joke") is command

    def test_register_into_unknown_or_builtin_group_fails(self):
        registry = CommandRegistry()
        with pytest.raises(RegistrationError):
            registry.register(make_command("joke"), "fun")
        with pytest.raises(RegistrationError):
            registry.register(make_command("joke"), BUILTIN_GROUP)

    def test_register_duplicate_fails(self):
        registry = CommandRegistry(BUILTIN_COMMANDS)
        registry.register_groups([("fun", "Fun commands")])
        with pytest.raises(RegistrationError):
            registry.register(make_command("help"), "fun")

    def test_register_rejects_non_commands(self):
        registry = CommandRegistry()
        registry.register_groups([("fun", "Fun commands")])
        with pytest.raises(RegistrationError):
            registry.register({"name": "joke"}, "fun")


class TestUsage:

    def test_usage_formats_arguments(self):
        command = make_command("note", arguments=[
            plain_arg("mode", one_of=("add", "remove")),
            plain_arg("name", optional=True),
            rest_arg("content"),
        ])
        assert command.usage() == "note <add|remove> [name] [content...]"

    def test_usage_without_arguments(self):
        assert make_command("ping").usage() == "ping"

    def test_log_registered_commands(self, caplog):
        registry = CommandRegistry(BUILTIN_COMMANDS)
        registry.register_groups([("fun", "Fun commands")])
        registry.load(discover_from({"fun": [make_command("joke")]}))
        logger = logging.getLogger("bandleader.test")
        with caplog.at_level(logging.INFO, logger="bandleader.test"):
            registry.log_registered_commands(logger)
        assert "fun: joke" in caplog.text
        assert "builtin: help, reload" in caplog.text


class TestExtraValidators:

    def test_validators_reject_discovered_and_registered_commands(self, caplog):
        registry = CommandRegistry(BUILTIN_COMMANDS, validators=[validate_slash_command])
        registry.register_groups([("fun", "Fun commands")])
        too_long = make_command("a" * 33)
        with caplog.at_level(logging.ERROR, logger="bandleader"):
            registry.load(discover_from({"fun": [too_long, make_command("Shout"), make_command("joke")]}))
        assert too_long.name not in registry
        assert "Shout" not in registry
        assert "joke" in registry
        assert "cannot be a slash command" in caplog.text

        with pytest.raises(RegistrationError):
            registry.register(make_command("two words"), "fun")

    def test_builtins_are_not_checked_by_validators(self):
        def reject_everything(command):
            raise RegistrationError(f"{command.name} rejected")

        registry = CommandRegistry(BUILTIN_COMMANDS, validators=[reject_everything])
        registry.register_groups([("fun", "Fun commands")])
        registry.load(discover_from({"fun": [make_command("joke")]}))
        assert "help" in registry
        assert "reload" in registry
        assert "joke" not in registry
