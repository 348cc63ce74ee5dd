"""Messenger Send API message payloads."""

import json
from urllib.parse import urlsplit, urlunsplit

from ..config import DialogTexts
from ..models import Profile, Question, QuestionKind, SentinelName


def answer_payload(question_index: int, answer_code: int) -> str:
    """Payload carried by an answer button or quick reply."""
    return json.dumps({"id": question_index, "answer": answer_code})


def add_afid(url: str | None, afid: str | None) -> str | None:
    """Append the affiliate id to a project link."""
    if not url or not afid:
        return url
    parts = urlsplit(url)
    query = f"{parts.query}&afid={afid}" if parts.query else f"afid={afid}"
    return urlunsplit(parts._replace(query=query))


class MessageBuilder:
    """Builds the JSON bodies posted to the Send API."""

    def __init__(
        self,
        texts: DialogTexts,
        project_landing: str | None = None,
        afid: str | None = None,
    ):
        self._texts = texts
        self._project_url = add_afid(project_landing, afid)

    @property
    def project_url(self) -> str | None:
        return self._project_url

    def text(self, user_id: str, text: str) -> dict:
        return {"recipient": {"id": user_id}, "message": {"text": text}}

    def typing_on(self, user_id: str) -> dict:
        return {"recipient": {"id": user_id}, "sender_action": "typing_on"}

    def question(self, user_id: str, question: Question, text: str | None = None) -> dict:
        """Question as a button template or as quick replies, per its kind."""
        text = text if text is not None else question.prompt

        if question.kind is QuestionKind.QUICK_REPLY:
            return {
                "recipient": {"id": user_id},
                "message": {
                    "text": text,
                    "quick_replies": [
                        {
                            "content_type": "text",
                            "title": label,
                            "payload": answer_payload(question.index, code),
                        }
                        for code, label in enumerate(question.answer_labels)
                    ],
                },
            }

        buttons = [
            self._postback_button(label, answer_payload(question.index, code))
            for code, label in enumerate(question.answer_labels)
        ]
        return self._button_template(user_id, text, buttons)

    def profile_card(self, user_id: str, profile: Profile, is_last: bool) -> dict:
        """Generic template for one found profile."""
        buttons = [
            {
                "type": "web_url",
                "url": profile.profile_url,
                "title": self._texts.view_profile,
            }
        ]

        if is_last:
            buttons.extend(self._follow_project_button())
            buttons.append(
                self._postback_button(self._texts.need_help, SentinelName.NEED_HELP.value)
            )
        else:
            buttons.append(
                self._postback_button(self._texts.next_profile, SentinelName.NEXT.value)
            )

        element = {
            "title": profile.title,
            "default_action": {"type": "web_url", "url": profile.profile_url},
            "buttons": buttons,
        }
        if profile.image_url:
            element["image_url"] = profile.image_url
        if profile.details:
            element["subtitle"] = profile.details

        return {
            "recipient": {"id": user_id},
            "message": {
                "attachment": {
                    "type": "template",
                    "payload": {"template_type": "generic", "elements": [element]},
                }
            },
        }

    def default_menu(self, user_id: str) -> dict:
        """Reply to free text in the middle of the dialog."""
        buttons = self._follow_project_button()
        buttons.append(
            self._postback_button(self._texts.need_help, SentinelName.NEED_HELP.value)
        )
        return self._button_template(user_id, self._texts.default_message, buttons)

    def no_profiles_menu(self, user_id: str) -> dict:
        """Nobody found: follow the project or change the answers."""
        return self._restart_menu(user_id, self._texts.no_people_found)

    def exhausted_menu(self, user_id: str) -> dict:
        """Every found profile was already shown."""
        text = self._texts.no_more_profiles or self._texts.default_message
        return self._restart_menu(user_id, text)

    def _restart_menu(self, user_id: str, text: str) -> dict:
        buttons = self._follow_project_button()
        buttons.append(
            self._postback_button(self._texts.change_settings, SentinelName.RESTART.value)
        )
        return self._button_template(user_id, text, buttons)

    def _follow_project_button(self) -> list[dict]:
        if not self._project_url:
            return []
        return [
            {
                "type": "web_url",
                "url": self._project_url,
                "title": self._texts.follow_project,
            }
        ]

    @staticmethod
    def _postback_button(title: str, payload: str) -> dict:
        return {"type": "postback", "title": title, "payload": payload}

    @staticmethod
    def _button_template(user_id: str, text: str, buttons: list[dict]) -> dict:
        return {
            "recipient": {"id": user_id},
            "message": {
                "attachment": {
                    "type": "template",
                    "payload": {
                        "template_type": "button",
                        "text": text,
                        "buttons": buttons,
                    },
                }
            },
        }
