"""Playwright-backed collaborators: a page execution context and a network log recorder."""
import re
import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from playwright.async_api import Page, async_playwright

from fetch.execution_context import RemoteFunction, ScriptDependency

logger = logging.getLogger(__name__)

_JS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Network events kept in the recorded log
RECORDED_EVENTS = (
    "Network.requestWillBeSent",
    "Network.responseReceived",
    "Network.loadingFinished",
    "Network.loadingFailed",
)


def build_expression(function: RemoteFunction, deps: Sequence[ScriptDependency] = ()) -> str:
    """Wrap dependency sources and a function into one evaluable async function.

    The result takes the call arguments as a single array. Each dependency's
    binding is passed ahead of them, so the function receives the catalog as a
    parameter instead of looking up a global.
    """
    for dep in deps:
        if not _JS_IDENTIFIER.match(dep.binding):
            raise ValueError(f"Invalid dependency binding: {dep.binding!r}")

    sources = "\n".join(dep.source for dep in deps)
    leading = "".join(f"{dep.binding}, " for dep in deps)
    return (
        "async (args) => {\n"
        f"{sources}\n"
        f"return await ({function.javascript.strip()})({leading}...args);\n"
        "}"
    )


class PlaywrightExecutionContext:
    def __init__(self, page: Page):
        self.page = page

    async def evaluate(
        self,
        function: RemoteFunction,
        args: Sequence[Any] = (),
        deps: Sequence[ScriptDependency] = (),
    ) -> Any:
        expression = build_expression(function, deps)
        logger.debug(f"Evaluating {function.name} in page ({len(expression)} chars)")
        return await self.page.evaluate(expression, list(args))


class DevtoolsLogRecorder:
    """Records Network domain events of a page as {"method", "params"} entries."""

    def __init__(self):
        self.entries: List[Dict[str, Any]] = []
        self.session = None

    async def attach(self, page: Page) -> None:
        self.session = await page.context.new_cdp_session(page)
        for method in RECORDED_EVENTS:
            self.session.on(method, partial(self._record, method))
        await self.session.send("Network.enable")
        logger.debug("DevTools network log recording started")

    def _record(self, method: str, params: Dict[str, Any]) -> None:
        self.entries.append({"method": method, "params": params})

    async def detach(self) -> None:
        if self.session is not None:
            await self.session.detach()
            self.session = None
            logger.debug(f"DevTools network log recording stopped ({len(self.entries)} entries)")


@asynccontextmanager
async def open_page(
    headless: bool = True,
    extra_headers: Optional[Dict[str, str]] = None,
) -> AsyncIterator[Tuple[Page, DevtoolsLogRecorder]]:
    """Launch Chromium and yield a fresh page with network recording attached."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            context = await browser.new_context(extra_http_headers=extra_headers or None)
            page = await context.new_page()
            recorder = DevtoolsLogRecorder()
            await recorder.attach(page)
            yield page, recorder
        finally:
            await browser.close()
