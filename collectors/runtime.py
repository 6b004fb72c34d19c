"""Runtime resource collection in a headless browser.

Backends register with CollectorRegistry. The "disabled" backend never
starts a browser; "playwright" drives headless Chromium and needs the
optional playwright package plus PLAYWRIGHT_ENABLED in the environment.
"""
import logging
import os
from typing import Optional

from collectors.static import collect_resources, resolve_origin
from core.collector_registry import CollectorRegistry
from fetch.http_client import DEFAULT_TIMEOUT_MS
from models.manifest import ResourceManifest

logger = logging.getLogger(__name__)

DEFAULT_WAIT_UNTIL = "networkidle"
WAIT_UNTIL_CHOICES = ("load", "domcontentloaded", "networkidle")
# Delay after load to catch late requests before the context closes
RUNTIME_SETTLE_MS = 500
ENABLE_ENV_VAR = "PLAYWRIGHT_ENABLED"

# Browser resource type -> manifest origin set
RESOURCE_TYPE_FIELDS = {
    "script": "external_script_origins",
    "stylesheet": "external_style_origins",
    "image": "image_origins",
    "font": "font_origins",
    "xhr": "connect_origins",
    "fetch": "connect_origins",
    "websocket": "connect_origins",
    "eventsource": "connect_origins",
}


class RuntimeUnavailable(Exception):
    """Raised when the browser engine is missing or could not load the page."""


def record_network_resource(manifest: ResourceManifest, resource_type: str, url: str) -> Optional[str]:
    """Add the origin of an observed request to the matching origin set."""
    field_name = RESOURCE_TYPE_FIELDS.get(resource_type)
    if not field_name:
        return None
    origin = resolve_origin(url)
    if origin:
        getattr(manifest, field_name).add(origin)
    return origin


@CollectorRegistry.register("disabled")
class DisabledRuntimeCollector:
    """Backend used when runtime collection is not configured."""

    async def collect(
        self,
        url: str,
        wait_until: str = DEFAULT_WAIT_UNTIL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> ResourceManifest:
        raise RuntimeUnavailable("Runtime collection is disabled")


@CollectorRegistry.register("playwright")
class PlaywrightRuntimeCollector:
    """Loads the page in headless Chromium and records resources after scripts run."""

    def __init__(self, settle_ms: int = RUNTIME_SETTLE_MS):
        self.settle_ms = settle_ms

    async def collect(
        self,
        url: str,
        wait_until: str = DEFAULT_WAIT_UNTIL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> ResourceManifest:
        """
        Collect resources from the rendered page plus its network activity.

        Returns:
            Static collection of the post-execution DOM merged with every
            origin seen on the network during the load

        Raises:
            RuntimeUnavailable: if playwright is missing, disabled, or fails
            ValueError: if wait_until is not a supported lifecycle event
        """
        if wait_until not in WAIT_UNTIL_CHOICES:
            raise ValueError(f"wait_until must be one of {', '.join(WAIT_UNTIL_CHOICES)}, got {wait_until}")
        if not os.environ.get(ENABLE_ENV_VAR):
            raise RuntimeUnavailable(f"{ENABLE_ENV_VAR} is not set")
        try:
            from playwright.async_api import Error as PlaywrightError
            from playwright.async_api import async_playwright
        except ImportError as e:
            raise RuntimeUnavailable("playwright is not installed") from e

        network = ResourceManifest()

        def on_request_finished(request) -> None:
            record_network_resource(network, request.resource_type, request.url)

        def on_websocket(websocket) -> None:
            record_network_resource(network, "websocket", websocket.url)

        logger.debug(f"Runtime collection of {url} (wait_until={wait_until}, timeout={timeout_ms}ms)")
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=True)
                try:
                    context = await browser.new_context()
                    page = await context.new_page()
                    page.on("requestfinished", on_request_finished)
                    page.on("websocket", on_websocket)
                    await page.goto(url, timeout=timeout_ms, wait_until=wait_until)
                    await page.wait_for_timeout(self.settle_ms)
                    html = await page.content()
                finally:
                    await browser.close()
        except PlaywrightError as e:
            raise RuntimeUnavailable(f"Browser run failed for {url}: {e}") from e

        manifest = collect_resources(html, url)
        manifest.merge(network)
        logger.debug(f"Runtime collection of {url}: {network.origin_count()} network origins")
        return manifest
