from dataclasses import dataclass, field
from functools import lru_cache
import logging
import os

from notesum.llm import PROVIDER_BASE_URLS
from notesum.types import LLMConfig


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


def split_model_id(model_id: str, *, default_provider: str) -> tuple[str, str]:
    """``"deepseek/deepseek-chat"`` -> ``("deepseek", "deepseek-chat")``.

    Only a known provider prefix is split off.
    """
    provider, separator, model = model_id.partition("/")
    if separator and model and provider.lower() in PROVIDER_BASE_URLS:
        return provider, model
    return default_provider, model_id


@dataclass(frozen=True)
class Settings:
    vault_dir: str
    database_url: str
    db_echo: bool
    llm_provider: str
    llm_model_id: str
    llm_timeout_seconds: float
    aggregate_workers: int
    log_level: str
    api_keys: dict[str, str] = field(default_factory=dict, repr=False)

    def llm_config(self, *, provider: str | None = None, model: str | None = None) -> LLMConfig:
        prefixed_provider, selected_model = split_model_id(
            model or self.llm_model_id,
            default_provider=self.llm_provider,
        )
        # An explicitly requested provider beats a provider/ prefix on the model id.
        selected_provider = provider or prefixed_provider
        return LLMConfig(
            provider=selected_provider,
            model=selected_model,
            api_key=self.api_keys.get(selected_provider.strip().lower(), ""),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings(
        vault_dir=os.getenv("NOTESUM_VAULT_DIR", "/workspace/vault"),
        database_url=os.getenv("NOTESUM_DATABASE_URL", "sqlite+pysqlite:///data/notesum.db"),
        db_echo=_to_bool(os.getenv("NOTESUM_DB_ECHO"), default=False),
        llm_provider=os.getenv("LLM_PROVIDER", "openai"),
        llm_model_id=os.getenv("LLM_MODEL_ID", "gpt-4o"),
        llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
        aggregate_workers=_to_int(os.getenv("NOTESUM_AGGREGATE_WORKERS"), default=1, minimum=1),
        log_level=os.getenv("NOTESUM_LOG_LEVEL", "INFO"),
        api_keys={
            "openai": os.getenv("OPENAI_API_KEY", ""),
            "anthropic": os.getenv("ANTHROPIC_API_KEY", ""),
            "deepseek": os.getenv("DEEPSEEK_API_KEY", ""),
        },
    )


def configure_logging(level: str) -> None:
    logger = logging.getLogger("notesum")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
