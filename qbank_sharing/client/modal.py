"""
Minimal modal dialog model and the fragment loader it renders from.

A modal keeps its title, body and footer as plain values. The body may be
set from an awaitable; :meth:`Modal.get_body_promise` waits for it to land.
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Optional, Set, Union

import httpx

logger = logging.getLogger(__name__)


@dataclass
class Button:
    text: str
    classes: Set[str] = field(default_factory=set)
    attributes: Dict[str, str] = field(default_factory=dict)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = "" if value is None else str(value)


class FragmentClient:
    """Loads server-rendered fragments: ``GET /fragment/<component>/<callback>``."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def load_fragment(self, component: str, callback: str, context_id: int, params: Dict[str, Any]) -> str:
        query = {"contextid": context_id}
        query.update({k: v for k, v in params.items() if v is not None})
        response = await self.client.get(f"/fragment/{component}/{callback}", params=query)
        response.raise_for_status()
        return response.json()["html"]


class Modal:
    def __init__(self):
        self.title: Optional[str] = None
        self.body: str = ""
        self.footer: Optional[Button] = None
        self.large = False
        self.shown = False
        self.remove_on_close = False
        self.hidden_selectors: Set[str] = set()
        self._body_task: Optional[asyncio.Future] = None

    def configure(self, config: Dict[str, Any]) -> None:
        self.large = bool(config.get("large", False))
        self.remove_on_close = bool(config.get("removeOnClose", False))
        if config.get("title") is not None:
            self.set_title(config["title"])
        if config.get("show"):
            self.show()

    def show(self) -> None:
        self.shown = True

    def hide(self) -> None:
        self.shown = False

    def set_title(self, title: str) -> None:
        self.title = title

    def set_footer(self, footer: Button) -> None:
        self.footer = footer

    def set_body(self, body: Union[str, Awaitable[str]]) -> None:
        if inspect.isawaitable(body):
            self._body_task = asyncio.ensure_future(body)
            self._body_task.add_done_callback(self._apply_body)
        else:
            self._body_task = None
            self.body = body

    def _apply_body(self, task: asyncio.Future) -> None:
        if task is self._body_task and not task.cancelled() and task.exception() is None:
            self.body = task.result()

    async def get_body_promise(self) -> str:
        if self._body_task is not None:
            self.body = await self._body_task
        return self.body

    def hide_element(self, selector: str) -> None:
        self.hidden_selectors.add(selector)
