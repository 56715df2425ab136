"""
User-facing moderation texts in the two supported languages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from modguard.configuration.moderation_config import Language


@dataclass(frozen=True, slots=True)
class ModerationTexts:
    """All strings shown to the offending user for one language."""

    channel_warning: str
    dm_title: str
    dm_description: str
    dm_reasons: str
    dm_actions: str
    dm_appeal: str
    dm_appeal_value: str
    dm_footer: str
    minutes: str

    def warning_for(self, mention: str, minutes: int) -> str:
        return self.channel_warning.format(mention=mention, minutes=minutes)

    def description_for(self, guild_name: str) -> str:
        return self.dm_description.format(guild=guild_name or "this server")


TEXTS: Dict[Language, ModerationTexts] = {
    Language.ENGLISH: ModerationTexts(
        channel_warning=(
            "⚠️ **{mention}**, your message was automatically deleted for violating "
            "server policies. You have been timed out for {minutes} minutes."
        ),
        dm_title="⚠️ Advanced Moderation Warning",
        dm_description="Your message in **{guild}** was automatically removed for violating server policies.",
        dm_reasons="📋 Policy Violations",
        dm_actions="⚡ Actions Taken",
        dm_appeal="💡 Appeal Process",
        dm_appeal_value="If you believe this was a mistake, please contact the server moderators with your User ID.",
        dm_footer="Please follow server rules and Discord Terms of Service",
        minutes="minutes",
    ),
    Language.PORTUGUESE: ModerationTexts(
        channel_warning=(
            "⚠️ **{mention}**, sua mensagem foi automaticamente removida por violar as "
            "políticas do servidor. Você foi silenciado por {minutes} minutos."
        ),
        dm_title="⚠️ Aviso de Moderação Avançada",
        dm_description="Sua mensagem em **{guild}** foi automaticamente removida por violar as políticas do servidor.",
        dm_reasons="📋 Violações de Política",
        dm_actions="⚡ Ações Tomadas",
        dm_appeal="💡 Processo de Recurso",
        dm_appeal_value=(
            "Se você acredita que foi um erro, entre em contato com os moderadores "
            "do servidor com seu ID de usuário."
        ),
        dm_footer="Por favor, siga as regras do servidor e os Termos de Serviço do Discord",
        minutes="minutos",
    ),
}


def texts_for(language: Language) -> ModerationTexts:
    return TEXTS.get(language, TEXTS[Language.ENGLISH])
