"""Texts and buttons served by the Telegram bot.

The main bot's buttons have no store; a store's own bot uses buttons tagged
with its store id. The "Sayt haqida" and "Sotuvchi bo'lish" buttons answer
with texts kept in ``site_settings`` and ``become_seller_page``.
"""

from typing import Dict, List, Optional

from ..db.session import get_session
from ..models.become_seller_page import BecomeSellerPage
from ..models.bot_button import BotButton
from ..models.bot_setting import BotSetting
from ..models.site_setting import SiteSetting
from ..utils.dto import to_bot_button_dto
from ..utils.labels import preview
from .logging import log_event


WELCOME_KEY = "welcome_message"
WELCOME_DESCRIPTION = "Приветственное сообщение бота"
SITE_ABOUT_KEY = "site_about"
SITE_ABOUT_DESCRIPTION = 'Текст ответа на кнопку "Sayt haqida"'
DEFAULT_SELLER_TITLE = "Sotuvchi bo'lish"


def response_key_for(button_text: str) -> Optional[str]:
    """Which stored text a button answers with, if any."""
    if "Sayt haqida" in button_text:
        return "site_about"
    if "Sotuvchi" in button_text:
        return "become_seller"
    return None


def split_seller_text(text: str):
    """First line is the title, the rest is the page body."""
    lines = text.split("\n")
    title = lines[0] or DEFAULT_SELLER_TITLE
    content = "\n".join(lines[1:]).strip()
    return title, content


class BotContentService:
    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def load(self) -> Dict:
        """Everything the bot tab shows: welcome text, main-bot buttons and answer texts."""
        with self._session_factory() as session:
            welcome = session.query(BotSetting).filter(BotSetting.key == WELCOME_KEY).first()
            buttons = (
                session.query(BotButton)
                .filter(BotButton.store_id.is_(None))
                .order_by(BotButton.order_index.asc())
                .all()
            )
            about = session.query(SiteSetting).filter(SiteSetting.key == SITE_ABOUT_KEY).first()
            seller = self._latest_seller_page(session)
            site_about = (about.value or "") if about else ""
            seller_title = (seller.title or "") if seller else ""
            data = {
                "welcome_message": welcome.value if welcome else "",
                "buttons": [to_bot_button_dto(b) for b in buttons],
                "site_about": site_about,
                "become_seller_title": seller_title,
                "become_seller_content": (seller.content or "") if seller else "",
            }
        for button in data["buttons"]:
            key = response_key_for(button["text"])
            if key == "site_about":
                button["response_preview"] = "Текущий ответ: " + preview(site_about)
            elif key == "become_seller":
                button["response_preview"] = "Текущий ответ: " + (seller_title or "Не задано")
            else:
                button["response_preview"] = 'Нажмите "Изменить ответ" для просмотра'
        return data

    @staticmethod
    def _latest_seller_page(session) -> Optional[BecomeSellerPage]:
        return (
            session.query(BecomeSellerPage)
            .filter(BecomeSellerPage.is_active.is_(True))
            .order_by(BecomeSellerPage.created_at.desc())
            .first()
        )

    def has_welcome_message(self) -> bool:
        with self._session_factory() as session:
            return session.query(BotSetting.id).filter(BotSetting.key == WELCOME_KEY).first() is not None

    def save_welcome_message(self, text: str) -> str:
        """Update the welcome text, inserting the setting row the first time.

        Returns ``"updated"`` or ``"created"``.
        """
        with self._session_factory() as session:
            existing = session.query(BotSetting).filter(BotSetting.key == WELCOME_KEY).first()
            if existing:
                existing.value = text
                outcome = "updated"
            else:
                session.add(BotSetting(key=WELCOME_KEY, value=text, description=WELCOME_DESCRIPTION))
                outcome = "created"
            session.flush()
        log_event("info", "bot.welcome_saved", outcome=outcome)
        return outcome

    def response_form(self, button_id: str) -> Optional[Dict]:
        """Form state for editing a button's answer, or ``None`` for plain buttons."""
        with self._session_factory() as session:
            button = session.get(BotButton, button_id)
            if button is None:
                raise ValueError("button not found")
            button_text = button.text
        key = response_key_for(button_text)
        if key is None:
            return None
        data = self.load()
        if key == "site_about":
            text = data["site_about"]
        else:
            text = f"{data['become_seller_title']}\n\n{data['become_seller_content']}"
        return {"buttonText": button_text, "buttonKey": key, "responseText": text}

    def save_button_response(self, button_key: str, response_text: str) -> None:
        with self._session_factory() as session:
            if button_key == "site_about":
                existing = session.query(SiteSetting).filter(SiteSetting.key == SITE_ABOUT_KEY).first()
                if existing:
                    existing.value = response_text
                else:
                    session.add(SiteSetting(key=SITE_ABOUT_KEY, value=response_text, description=SITE_ABOUT_DESCRIPTION))
            elif button_key == "become_seller":
                title, content = split_seller_text(response_text)
                existing = self._latest_seller_page(session)
                if existing:
                    existing.title = title
                    existing.content = content
                else:
                    session.add(BecomeSellerPage(title=title, content=content, is_active=True))
            else:
                raise ValueError(f"unknown button response: {button_key!r}")
        log_event("info", "bot.response_saved", button_key=button_key)

    # buttons

    def list_buttons(self, store_id: Optional[str] = None) -> List[Dict]:
        with self._session_factory() as session:
            q = session.query(BotButton)
            q = q.filter(BotButton.store_id == store_id) if store_id else q.filter(BotButton.store_id.is_(None))
            return [to_bot_button_dto(b) for b in q.order_by(BotButton.order_index.asc()).all()]

    def _owned_button(self, session, button_id: str, store_id: Optional[str]) -> BotButton:
        button = session.get(BotButton, button_id)
        if button is None or button.store_id != store_id:
            raise ValueError("button not found")
        return button

    def create_button(self, *, text: str, action: Optional[str] = None, order_index: int = 0, is_active: bool = True, store_id: Optional[str] = None) -> Dict:
        text = (text or "").strip()
        if not text:
            raise ValueError("button text is required")
        with self._session_factory() as session:
            button = BotButton(text=text, action=action or None, order_index=int(order_index or 0), is_active=bool(is_active), store_id=store_id)
            session.add(button)
            session.flush()
            return to_bot_button_dto(button)

    def update_button(self, button_id: str, fields: Dict, *, store_id: Optional[str] = None) -> Dict:
        with self._session_factory() as session:
            button = self._owned_button(session, button_id, store_id)
            if "text" in fields:
                text = (fields["text"] or "").strip()
                if not text:
                    raise ValueError("button text is required")
                button.text = text
            if "action" in fields:
                button.action = fields["action"] or None
            if "order_index" in fields:
                button.order_index = int(fields["order_index"] or 0)
            if "is_active" in fields:
                button.is_active = bool(fields["is_active"])
            session.flush()
            return to_bot_button_dto(button)

    def delete_button(self, button_id: str, *, store_id: Optional[str] = None) -> None:
        with self._session_factory() as session:
            session.delete(self._owned_button(session, button_id, store_id))
        return None
