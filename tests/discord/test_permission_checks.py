"""
Tests for the permission gate run before every command.

Bot permissions are checked first, then the requirement placed on the
invoking user. Owners of the bot bypass user requirements only.
"""

from unittest.mock import AsyncMock

import pytest

from bandleader.bot_impl import USER_MISSING_PERMISSIONS, PermissionDenied
from bandleader.commands.command_enums import EventKind
from bandleader.model.events import BotEvent
from bandleader.model.permissions import BOT_OWNER, GUILD_OWNER, flags
from tests.fixtures.command_testing import last_content, make_command, make_wrapper, run_text_command
from tests.fixtures.discord_mocks import mock_discord_setup


async def invoke(setup, command, member_key, channel_key='general', **settings):
    wrapper = make_wrapper(setup['client'], command, **settings)
    channel = setup['channels'][channel_key]
    await run_text_command(wrapper, f"!{command.name}", setup['members'][member_key], channel, setup['guild'])
    return channel


class TestBotOwner:

    @pytest.mark.asyncio
    async def test_owner_may_run(self, mock_discord_setup):
        command = make_command("shutdown", user_permissions=BOT_OWNER)
        await invoke(mock_discord_setup, command, 'owner')
        command.handler.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("member_key", ['member', 'guild_owner'])
    async def test_others_are_denied(self, mock_discord_setup, member_key):
        command = make_command("shutdown", user_permissions=BOT_OWNER)
        channel = await invoke(mock_discord_setup, command, member_key)
        command.handler.assert_not_awaited()
        assert last_content(channel) == USER_MISSING_PERMISSIONS


class TestGuildOwner:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("member_key", ['guild_owner', 'owner'])
    async def test_guild_owner_and_bot_owner_may_run(self, mock_discord_setup, member_key):
        command = make_command("setup", user_permissions=GUILD_OWNER)
        await invoke(mock_discord_setup, command, member_key)
        command.handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_member_is_denied(self, mock_discord_setup):
        command = make_command("setup", user_permissions=GUILD_OWNER)
        await invoke(mock_discord_setup, command, 'moderator')
        command.handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_denied_in_direct_messages(self, mock_discord_setup):
        command = make_command("setup", user_permissions=GUILD_OWNER)
        wrapper = make_wrapper(mock_discord_setup['client'], command)
        author = mock_discord_setup['members']['guild_owner']
        await run_text_command(wrapper, "!setup", author, await author.create_dm())
        command.handler.assert_not_awaited()


class TestPermissionFlags:

    @pytest.mark.asyncio
    async def test_member_with_flags_may_run(self, mock_discord_setup):
        command = make_command("purge", user_permissions=flags("manage_messages"))
        await invoke(mock_discord_setup, command, 'moderator')
        command.handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_member_without_flags_is_told_what_is_missing(self, mock_discord_setup):
        command = make_command("purge", user_permissions=flags("manage_messages", "send_messages"))
        channel = await invoke(mock_discord_setup, command, 'member')
        command.handler.assert_not_awaited()
        assert last_content(channel) == f"{USER_MISSING_PERMISSIONS}\nRequired permissions: manage_messages"

    @pytest.mark.asyncio
    async def test_flags_are_checked_per_channel(self, mock_discord_setup):
        command = make_command("purge", user_permissions=flags("manage_messages"))
        await invoke(mock_discord_setup, command, 'moderator', channel_key='announcements')
        command.handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flags_are_skipped_in_direct_messages(self, mock_discord_setup):
        command = make_command("purge", user_permissions=flags("manage_messages"))
        wrapper = make_wrapper(mock_discord_setup['client'], command)
        author = mock_discord_setup['members']['member']
        await run_text_command(wrapper, "!purge", author, await author.create_dm())
        command.handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_owner_bypasses_flags(self, mock_discord_setup):
        command = make_command("purge", user_permissions=flags("administrator"))
        await invoke(mock_discord_setup, command, 'owner')
        command.handler.assert_awaited_once()


class TestBotPermissions:

    @pytest.mark.asyncio
    async def test_bot_with_permissions_runs(self, mock_discord_setup):
        command = make_command("purge", bot_permissions=flags("manage_messages"))
        await invoke(mock_discord_setup, command, 'member')
        command.handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_bot_permissions_are_listed(self, mock_discord_setup):
        command = make_command("purge", bot_permissions=flags("manage_messages", "read_message_history"))
        channel = await invoke(mock_discord_setup, command, 'member')
        command.handler.assert_not_awaited()
        assert last_content(channel).endswith("Required permissions: read_message_history")

    @pytest.mark.asyncio
    async def test_owners_do_not_bypass_bot_permissions(self, mock_discord_setup):
        command = make_command("purge", bot_permissions=flags("manage_messages"))
        channel = await invoke(mock_discord_setup, command, 'owner', channel_key='announcements')
        command.handler.assert_not_awaited()
        assert "Required permissions: manage_messages" in last_content(channel)

    @pytest.mark.asyncio
    async def test_bot_is_checked_before_the_user(self, mock_discord_setup):
        command = make_command("purge", bot_permissions=flags("manage_messages"), user_permissions=BOT_OWNER)
        wrapper = make_wrapper(mock_discord_setup['client'], command)
        with pytest.raises(PermissionDenied) as denied:
            await wrapper.check_permissions(command, mock_discord_setup['members']['member'],
                                            mock_discord_setup['guild'],
                                            channel=mock_discord_setup['channels']['announcements'])
        assert denied.value.kind is EventKind.CMD_BOT_MISSING_PERMISSION
        assert denied.value.missing == ("manage_messages",)


@pytest.mark.asyncio
async def test_denials_emit_events(mock_discord_setup):
    command = make_command("shutdown", user_permissions=BOT_OWNER)
    wrapper = make_wrapper(mock_discord_setup['client'], command)
    on_denied = AsyncMock()
    wrapper.event_registry.register(BotEvent("audit", (EventKind.CMD_USER_MISSING_PERMISSION,), on_denied))

    await run_text_command(wrapper, "!shutdown", mock_discord_setup['members']['member'],
                           mock_discord_setup['channels']['general'], mock_discord_setup['guild'])

    event_wrapper, data = on_denied.await_args.args
    assert event_wrapper is wrapper
    assert data.command.name == "shutdown"
    assert data.missing_permissions == ("BOT_OWNER",)
