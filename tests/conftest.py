"""
Pytest configuration and fixtures for Modguard tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))
sys.path.insert(0, str(Path(__file__).parent))

from modguard.configuration.moderation_config import Language, TenantModerationConfig  # noqa: E402
from modguard.datatypes.discord_datatypes import MessageID  # noqa: E402
from modguard.datatypes.platform_refs import MessageRef  # noqa: E402
from modguard.moderation.capability import ActionResult  # noqa: E402
from moderation_fixtures import GUILD, LOG_CHANNEL, make_envelope  # noqa: E402


@pytest.fixture
def envelope_factory():
    return make_envelope


@pytest.fixture
def enabled_config() -> TenantModerationConfig:
    return TenantModerationConfig(guild_id=GUILD, enabled=True, log_channel_id=LOG_CHANNEL, language=Language.ENGLISH)


@pytest.fixture
def mock_platform():
    """A ChatPlatform double where every call succeeds."""
    platform = MagicMock()
    platform.delete_message = AsyncMock(return_value=ActionResult.ok())
    platform.timeout_member = AsyncMock(return_value=ActionResult.ok())
    platform.send_direct_message = AsyncMock(return_value=ActionResult.ok())

    async def send_channel_message(channel, content=None, embed=None):
        return ActionResult.ok(MessageRef(channel=channel, message_id=MessageID(9999)))

    platform.send_channel_message = AsyncMock(side_effect=send_channel_message)
    platform.can_timeout_members = MagicMock(return_value=True)
    return platform
