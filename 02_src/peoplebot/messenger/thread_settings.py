"""One-time Messenger page setup: greeting, Get Started, persistent menu."""

from ..config import Settings
from ..errors import DeliveryFailed
from ..logging_config import get_logger
from ..models import SentinelName
from .client import SendAPIClient
from .templates import add_afid

logger = get_logger(__name__)


class ThreadSettingsConfigurator:
    """Applies the page's thread settings from the bot config."""

    def __init__(self, client: SendAPIClient, settings: Settings):
        self._client = client
        self._settings = settings

    async def configure_all(self) -> dict[str, bool]:
        """Run every setup call; returns success per setting."""
        texts = self._settings.dialog.texts
        results: dict[str, bool] = {}

        if self._settings.whitelist_domains:
            results["domain_whitelisting"] = await self._configure(
                "thread_settings",
                {
                    "setting_type": "domain_whitelisting",
                    "whitelisted_domains": self._settings.whitelist_domains,
                    "domain_action_type": "add",
                },
            )

        results["subscribed_apps"] = await self._configure("subscribed_apps")

        if texts.greeting_message:
            results["greeting"] = await self._configure(
                "thread_settings",
                {"setting_type": "greeting", "greeting": {"text": texts.greeting_message}},
            )
        else:
            results["greeting"] = await self._configure(
                "thread_settings", {"setting_type": "greeting"}, method="DELETE"
            )

        if self._settings.dialog.get_started_button:
            results["get_started"] = await self._configure(
                "thread_settings",
                {
                    "setting_type": "call_to_actions",
                    "thread_state": "new_thread",
                    "call_to_actions": [{"payload": SentinelName.NEW_THREAD.value}],
                },
            )
        else:
            results["get_started"] = await self._configure(
                "thread_settings",
                {"setting_type": "call_to_actions", "thread_state": "new_thread"},
                method="DELETE",
            )

        results["persistent_menu"] = await self._configure(
            "thread_settings",
            {
                "setting_type": "call_to_actions",
                "thread_state": "existing_thread",
                "call_to_actions": self._persistent_menu(),
            },
        )
        return results

    def _persistent_menu(self) -> list[dict]:
        texts = self._settings.dialog.texts
        menu = []
        project_url = add_afid(self._settings.dialog.project_landing, self._settings.afid)
        if project_url:
            menu.append({"type": "web_url", "url": project_url, "title": texts.follow_project})
        menu.append(
            {
                "type": "postback",
                "title": texts.change_settings,
                "payload": SentinelName.RESTART.value,
            }
        )
        return menu

    async def _configure(
        self, path: str, data: dict | None = None, method: str = "POST"
    ) -> bool:
        name = path + (f".{data['setting_type']}" if data and "setting_type" in data else "")
        try:
            body = await self._client.graph_request(path, data, method=method)
        except DeliveryFailed as e:
            logger.error('Facebook application configure failed for "%s": %s', name, e)
            return False

        result = body.get("result")
        logger.info(
            'Facebook application configure success for "%s"%s',
            name,
            f" ({result})" if result else "",
        )
        return True
