"""Audit client: render the security prompt, call the model, classify failures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from aura.config import Settings
from aura.llm import get_provider
from aura.llm.base import LLMProvider
from aura.llm.errors import ConfigurationMissing, RemoteFailure, RemoteUnavailable
from aura.schemas.models import AppMetadata

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
SYSTEM_TEMPLATE = "security_audit_system.j2"
USER_TEMPLATE = "security_audit_user.j2"

_env = Environment(loader=FileSystemLoader(str(PROMPTS_DIR)), undefined=StrictUndefined)


@dataclass(frozen=True)
class AuditPrompt:
    system: str
    user: str


def build_prompt(metadata: AppMetadata) -> AuditPrompt:
    """Render the system instruction and user content. Same metadata, same prompt."""
    system = _env.get_template(SYSTEM_TEMPLATE).render().strip()
    user = _env.get_template(USER_TEMPLATE).render(**metadata.model_dump()).strip()
    return AuditPrompt(system=system, user=user)


class AuditClient:
    """Calls the model endpoint once per audit. Persists nothing."""

    def __init__(self, provider: LLMProvider | None, *, timeout: float = 30.0, provider_name: str = ""):
        self._provider = provider
        self.timeout = timeout
        self.provider_name = provider_name

    @property
    def model(self) -> str:
        return getattr(self._provider, "model", "") if self._provider else ""

    @classmethod
    def from_settings(cls, settings: Settings, provider_name: str | None = None) -> "AuditClient":
        """Build a client for the configured provider; a missing key yields an unconfigured client."""
        name, api_key, model = settings.llm_credentials(provider_name)
        if not api_key:
            logger.warning("No API key configured for provider '%s'; audits will report configuration_missing", name)
            return cls(None, timeout=settings.aura_audit_timeout_seconds, provider_name=name)
        provider = get_provider(
            name,
            api_key=api_key,
            model=model,
            base_url=settings.aura_openai_base_url,
            timeout=settings.aura_audit_timeout_seconds,
        )
        return cls(provider, timeout=settings.aura_audit_timeout_seconds, provider_name=name)

    def audit(self, metadata: AppMetadata) -> str:
        """Return the model's raw reply text.

        Raises ConfigurationMissing, RemoteUnavailable or RemoteRejected.
        """
        if self._provider is None:
            raise ConfigurationMissing(
                f"API key not configured for provider '{self.provider_name or 'unknown'}'"
            )
        prompt = build_prompt(metadata)
        try:
            return self._provider.complete(prompt.user, system=prompt.system, timeout=self.timeout)
        except RemoteFailure:
            raise
        except Exception as e:
            # Transport errors that escaped the provider's own translation
            raise RemoteUnavailable(f"Model call failed: {e}") from e
