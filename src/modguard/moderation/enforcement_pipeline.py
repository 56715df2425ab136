"""
Best-effort enforcement for flagged messages.

Steps run in a fixed order: delete, warning, timeout, log post, DM. Every
step is bounded by ``action_timeout`` and wrapped so that a failed, raising or
hanging platform call becomes an :class:`EnforcementOutcome` and the next
step still runs. Nothing is retried.

The only deferred work is the removal of the channel warning, which runs as a
tracked task and is cancelled by :meth:`EnforcementPipeline.shutdown`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from modguard.configuration.moderation_config import TenantModerationConfig
from modguard.configuration.moderation_settings import ModerationSettings
from modguard.datatypes.platform_refs import ChannelRef, MessageEnvelope, MessageRef
from modguard.detection.classifier import ClassificationResult
from modguard.moderation.capability import ActionResult, ChatPlatform
from modguard.moderation.embeds import build_audit_embed, build_dm_embed
from modguard.moderation.enforcement_datatypes import EnforcementAction, EnforcementOutcome
from modguard.moderation.messages import texts_for
from modguard.util.logger import get_logger

logger = get_logger("enforcement_pipeline")

TIMEOUT_REASON_PREFIX = "Automatic moderation: "


class EnforcementPipeline:
    """Runs the moderation actions for flagged messages against a :class:`ChatPlatform`."""

    def __init__(self, platform: ChatPlatform, settings: ModerationSettings | None = None) -> None:
        self.platform = platform
        self.settings = settings or ModerationSettings()
        self._pending_cleanups: Set[asyncio.Task] = set()

    @property
    def timeout_minutes(self) -> int:
        return int(self.settings.timeout_duration.total_seconds() // 60)

    async def run(
        self,
        envelope: MessageEnvelope,
        classification: ClassificationResult,
        config: TenantModerationConfig,
    ) -> List[EnforcementOutcome]:
        """Execute every step for ``envelope`` and return one outcome per step."""
        outcomes: List[EnforcementOutcome] = []

        outcomes.append(await self._delete(envelope))
        outcomes.append(await self._warn(envelope, config))
        outcomes.append(await self._timeout(envelope, classification))

        taken = [outcome.action for outcome in outcomes if outcome.succeeded]
        outcomes.append(await self._post_audit_log(envelope, classification, config, taken))
        outcomes.append(await self._notify_author(envelope, classification, config, taken))

        failed = [str(outcome.action) for outcome in outcomes if not outcome.succeeded and not outcome.skipped]
        if failed:
            logger.warning(
                "[ENFORCEMENT] Message %s in guild %s enforced with failed steps: %s",
                envelope.ref.message_id,
                envelope.guild_id,
                ", ".join(failed),
            )
        return outcomes

    async def shutdown(self) -> None:
        """Cancel pending warning removals and wait for them to finish."""
        tasks = list(self._pending_cleanups)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending_cleanups.clear()
        logger.debug("[ENFORCEMENT] Cancelled %d pending warning removals", len(tasks))

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _delete(self, envelope: MessageEnvelope) -> EnforcementOutcome:
        outcome, _ = await self._attempt(EnforcementAction.DELETE, lambda: self.platform.delete_message(envelope.ref))
        return outcome

    async def _warn(self, envelope: MessageEnvelope, config: TenantModerationConfig) -> EnforcementOutcome:
        text = texts_for(config.language).warning_for(envelope.author.mention, self.timeout_minutes)
        outcome, result = await self._attempt(
            EnforcementAction.WARNING,
            lambda: self.platform.send_channel_message(envelope.channel, content=text),
        )
        if result is not None and result.message is not None:
            self._schedule_warning_removal(result.message)
        return outcome

    async def _timeout(self, envelope: MessageEnvelope, classification: ClassificationResult) -> EnforcementOutcome:
        action = EnforcementAction.TIMEOUT
        try:
            permitted = self.platform.can_timeout_members(envelope.guild_id)
        except Exception as exc:
            logger.warning("[ENFORCEMENT] Permission check failed in guild %s: %s", envelope.guild_id, exc)
            return EnforcementOutcome.failure(action, f"permission check failed: {exc}")

        if not permitted:
            logger.debug("[ENFORCEMENT] Missing timeout permission in guild %s, skipping", envelope.guild_id)
            return EnforcementOutcome.skip(action, "missing moderate members permission")

        reason = TIMEOUT_REASON_PREFIX + ", ".join(classification.reasons)
        outcome, _ = await self._attempt(
            action,
            lambda: self.platform.timeout_member(envelope.author, envelope.guild_id, self.settings.timeout_duration, reason),
        )
        return outcome

    async def _post_audit_log(
        self,
        envelope: MessageEnvelope,
        classification: ClassificationResult,
        config: TenantModerationConfig,
        taken: List[EnforcementAction],
    ) -> EnforcementOutcome:
        action = EnforcementAction.LOG_POST
        if config.log_channel_id is None:
            return EnforcementOutcome.skip(action, "no log channel configured")

        embed = build_audit_embed(
            envelope,
            classification,
            taken,
            self.timeout_minutes,
            self.settings.audit_content_limit,
        )
        log_channel = ChannelRef(guild_id=envelope.guild_id, channel_id=config.log_channel_id)
        outcome, _ = await self._attempt(action, lambda: self.platform.send_channel_message(log_channel, embed=embed))
        return outcome

    async def _notify_author(
        self,
        envelope: MessageEnvelope,
        classification: ClassificationResult,
        config: TenantModerationConfig,
        taken: List[EnforcementAction],
    ) -> EnforcementOutcome:
        embed = build_dm_embed(envelope, classification, taken, self.timeout_minutes, texts_for(config.language))
        outcome, _ = await self._attempt(
            EnforcementAction.DM_NOTIFY,
            lambda: self.platform.send_direct_message(envelope.author, embed=embed),
            level=logging.DEBUG,
        )
        return outcome

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        action: EnforcementAction,
        call: Callable[[], Awaitable[ActionResult]],
        level: int = logging.WARNING,
    ) -> Tuple[EnforcementOutcome, Optional[ActionResult]]:
        """Await one platform call, converting every failure mode into an outcome."""
        try:
            result = await asyncio.wait_for(call(), timeout=self.settings.action_timeout)
        except asyncio.TimeoutError:
            logger.log(level, "[ENFORCEMENT] %s timed out after %.1fs", action, self.settings.action_timeout)
            return EnforcementOutcome.failure(action, "timed out"), None
        except Exception as exc:
            logger.log(level, "[ENFORCEMENT] %s raised %s: %s", action, type(exc).__name__, exc)
            return EnforcementOutcome.failure(action, str(exc) or type(exc).__name__), None

        if not result.succeeded:
            detail = result.error_detail or "failed"
            logger.log(level, "[ENFORCEMENT] %s failed: %s", action, detail)
            return EnforcementOutcome.failure(action, detail), result
        return EnforcementOutcome.success(action), result

    def _schedule_warning_removal(self, ref: MessageRef) -> None:
        task = asyncio.create_task(self._remove_warning_later(ref))
        self._pending_cleanups.add(task)
        task.add_done_callback(self._pending_cleanups.discard)

    async def _remove_warning_later(self, ref: MessageRef) -> None:
        await asyncio.sleep(self.settings.warning_delete_delay)
        try:
            result = await asyncio.wait_for(self.platform.delete_message(ref), timeout=self.settings.action_timeout)
        except asyncio.TimeoutError:
            logger.debug("[ENFORCEMENT] Removing warning %s timed out", ref.message_id)
            return
        except Exception as exc:
            logger.debug("[ENFORCEMENT] Removing warning %s raised: %s", ref.message_id, exc)
            return
        if not result.succeeded:
            logger.debug("[ENFORCEMENT] Warning %s already gone: %s", ref.message_id, result.error_detail)
