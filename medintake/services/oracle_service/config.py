"""Oracle Service configuration.

The oracle is optional. Without an API key no client is constructed and
every request takes the local fallback path.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional


# Placeholder keys that mean "no key configured"
PLACEHOLDER_API_KEYS = frozenset({"", "demo-key"})


@dataclass(frozen=True)
class OracleConfig:
    """Configuration for oracle requests."""

    api_key: Optional[str] = None

    # Model for diagnostic question suggestions
    model_name: str = "gpt-4o-mini"

    # Model for the doctor-facing analysis
    analysis_model_name: str = "gpt-4o-mini"

    temperature: float = 0.3
    max_tokens: int = 1500

    # Hard budget for one oracle call, including retries inside the client
    timeout_seconds: float = 30.0

    @property
    def enabled(self) -> bool:
        return (self.api_key or "") not in PLACEHOLDER_API_KEYS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OracleConfig":
        """Build config from OPENAI_API_KEY, ORACLE_MODEL, ORACLE_ANALYSIS_MODEL
        and ORACLE_TIMEOUT_SECONDS.
        """
        env = os.environ if environ is None else environ
        model_name = env.get("ORACLE_MODEL", cls.model_name)
        return cls(
            api_key=env.get("OPENAI_API_KEY"),
            model_name=model_name,
            analysis_model_name=env.get("ORACLE_ANALYSIS_MODEL", model_name),
            timeout_seconds=float(env.get("ORACLE_TIMEOUT_SECONDS", cls.timeout_seconds)),
        )
