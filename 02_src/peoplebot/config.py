"""Project-level configuration and path helpers."""

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "03_config"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "default.json"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]

# Environment variables that take precedence over the config file.
ENV_OVERRIDES = {
    "app_secret": "MESSENGER_APP_SECRET",
    "validation_token": "MESSENGER_VALIDATION_TOKEN",
    "page_access_token": "MESSENGER_PAGE_ACCESS_TOKEN",
    "server_url": "SERVER_URL",
    "search_url": "PEOPLE_SEARCH_URL",
}


class ExhaustedPolicy(str, Enum):
    """What a "next" tap does once every found profile has been shown."""

    REQUIRE_RESTART = "require_restart"
    REFRESH = "refresh"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuestionConfig(_CamelModel):
    """A question as written in the config file."""

    type: str = "button"
    question: str
    answers: list[str]
    search_params: dict[int, dict[str, Any]] = Field(default_factory=dict)
    persistent: bool = False

    @field_validator("search_params", mode="before")
    @classmethod
    def _index_search_params(cls, value: Any) -> Any:
        # Accept a list aligned with answers as well as {"0": {...}} objects.
        if value is None:
            return {}
        if isinstance(value, list):
            return {i: params for i, params in enumerate(value) if params}
        return value


class DialogTexts(_CamelModel):
    """User-facing text templates."""

    default_message: str = "Use the menu below to continue."
    no_people_found: str = "Nobody matches your answers yet."
    no_more_profiles: str | None = None
    support: str = "Write to us and we will help."
    view_profile: str = "View profile"
    follow_project: str = "Follow the project"
    need_help: str = "Need help"
    next_profile: str = "Next profile"
    change_settings: str = "Change settings"
    greeting_dialog_message: str | None = None
    greeting_message: str | None = None
    authentication_successful: str = "Authentication successful"


class DialogConfig(_CamelModel):
    """Question catalog and dialog behaviour."""

    questions: list[QuestionConfig] = Field(default_factory=list)
    texts: DialogTexts = Field(default_factory=DialogTexts)
    project_landing: str | None = None
    get_started_button: bool = False
    greeting_enabled: bool = True
    first_question_delay: float = 3.0
    exhausted_policy: ExhaustedPolicy = ExhaustedPolicy.REQUIRE_RESTART


class Settings(_CamelModel):
    """Runtime settings of the bot."""

    app_secret: str | None = None
    validation_token: str | None = None
    page_access_token: str | None = None
    server_url: str | None = Field(default=None, alias="serverURL")
    facebook_graph_url: str = Field(
        default="https://graph.facebook.com/v2.6/me/", alias="facebookGraphURL"
    )
    dialog_lifetime: float = 600.0
    afid: str | None = None
    whitelist_domains: list[str] = Field(default_factory=list)
    search_url: str | None = Field(default=None, alias="searchURL")
    search_timeout: float = 10.0
    send_timeout: float = 10.0
    require_signature: bool = False
    dialog: DialogConfig = Field(default_factory=DialogConfig)

    def missing_credentials(self) -> list[str]:
        """Names of the credentials the webhook cannot run without."""
        required = ("app_secret", "validation_token", "page_access_token", "server_url")
        return [name for name in required if not getattr(self, name)]

    def listen_address(self) -> tuple[str, int]:
        """Host and port to bind: HOST/PORT env, then serverURL, then localhost:8000."""
        parsed = urlparse(self.server_url) if self.server_url else None
        host = os.getenv("HOST") or (parsed.hostname if parsed else None) or "localhost"
        port = os.getenv("PORT") or (parsed.port if parsed else None) or 8000
        return host, int(port)


def resolve_config_path(env_value: PathLike | None = None) -> Path:
    """Resolve BOT_CONFIG to an absolute path."""
    if not env_value:
        return DEFAULT_CONFIG_PATH

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def load_settings(path: PathLike | None = None) -> Settings:
    """Load settings from the JSON config file and apply environment overrides."""
    config_path = resolve_config_path(path if path is not None else os.getenv("BOT_CONFIG"))

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)

    settings = Settings.model_validate(data)

    overrides = {
        field: os.environ[env_name]
        for field, env_name in ENV_OVERRIDES.items()
        if os.getenv(env_name)
    }
    if overrides:
        settings = settings.model_copy(update=overrides)

    return settings
