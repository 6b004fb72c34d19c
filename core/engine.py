import logging
from typing import Dict, Optional, Tuple

# Importing collectors.runtime registers the runtime backends
from collectors.runtime import DEFAULT_WAIT_UNTIL, RuntimeUnavailable
from collectors.static import collect_resources
from core.collector_registry import CollectorRegistry
from core.crawler import DEFAULT_MAX_PAGES, crawl
from core.policy_builder import build_policy, summarize_directives
from core.policy_diff import diff_policies
from core.risk_assessor import assess_policy
from fetch.http_client import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_MS, fetch_page
from models.manifest import ResourceManifest
from models.report import RUNTIME_DISABLED, RUNTIME_OK, RUNTIME_UNAVAILABLE, AnalysisReport
from rules.rules_loader import load_policy_floor, load_recommended_headers, load_risk_rubric


class Engine:
    def __init__(self, runtime_backend: str = "disabled", custom_headers: Optional[Dict[str, str]] = None):
        """Initialize the engine with its rule tables and runtime backend.

        Args:
            runtime_backend: Registered runtime collector name (e.g. 'disabled', 'playwright')
            custom_headers: Extra request headers sent with every page fetch
        """
        self.logger = logging.getLogger(__name__)
        self.custom_headers = custom_headers or {}
        self.rubric = load_risk_rubric()
        self.floor = load_policy_floor()
        self.recommended_headers = load_recommended_headers()
        self.logger.info(f"Loaded risk rubric v{self.rubric.version} with {len(self.rubric.checks)} checks")

        self.runtime_backend = runtime_backend
        self.runtime_collector = CollectorRegistry.create(runtime_backend)
        self.logger.info(f"Runtime collector: {runtime_backend}")

    async def collect_runtime(self, url: str, timeout_ms: int) -> Tuple[Optional[ResourceManifest], str]:
        """Run the runtime collector; failures become an 'unavailable' status."""
        try:
            manifest = await self.runtime_collector.collect(url, wait_until=DEFAULT_WAIT_UNTIL, timeout_ms=timeout_ms)
        except RuntimeUnavailable as e:
            self.logger.warning(f"Runtime collection unavailable, continuing with static parse: {e}")
            return None, RUNTIME_UNAVAILABLE
        return manifest, RUNTIME_OK

    async def analyze(
        self,
        url: str,
        strict: bool = False,
        runtime: bool = False,
        depth: int = 0,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> AnalysisReport:
        """Fetch, collect, optionally render and crawl, then build and score both policies.

        Raises:
            FetchError: if the target page itself cannot be fetched
        """
        logger = self.logger
        logger.debug(f"Starting analysis of {url} (strict={strict}, runtime={runtime}, depth={depth})")

        # 1. Fetch the target page; failure here aborts the analysis
        page = await fetch_page(url, timeout_ms=timeout_ms, max_retries=DEFAULT_MAX_RETRIES, headers=self.custom_headers)
        logger.info(f"Fetched {page.final_url}, status: {page.status}")

        # 2. Static collection
        resources = collect_resources(page.html, page.final_url)

        # 3. Optional runtime collection replaces the static manifest
        runtime_status = RUNTIME_DISABLED
        if runtime:
            runtime_resources, runtime_status = await self.collect_runtime(page.final_url, timeout_ms)
            if runtime_resources is not None:
                resources = runtime_resources

        # 4. Optional crawl, merged into the primary manifest
        pages = [page.final_url]
        outcomes = []
        if depth > 0:
            crawl_result = await crawl(
                page.final_url,
                depth,
                same_origin_only=True,
                max_pages=max_pages,
                timeout_ms=timeout_ms,
                headers=self.custom_headers,
            )
            pages = crawl_result.pages
            outcomes = crawl_result.outcomes
            resources.merge(crawl_result.resources)

        # 5. Build and score both variants
        baseline = build_policy(resources, strict=False, existing=page.csp_header, floor=self.floor)
        strict_result = build_policy(resources, strict=True, existing=page.csp_header, floor=self.floor)
        active_mode = "strict" if strict else "baseline"
        active = strict_result if strict else baseline

        risk = {
            "active": assess_policy(active.policy, self.rubric),
            "baseline": assess_policy(baseline.policy, self.rubric),
            "strict": assess_policy(strict_result.policy, self.rubric),
        }
        logger.info(
            f"Policies built: baseline score {risk['baseline'].score} ({risk['baseline'].level}), "
            f"strict score {risk['strict'].score} ({risk['strict'].level})"
        )

        return AnalysisReport(
            input=url,
            final_url=page.final_url,
            status=page.status,
            existing=page.csp_header,
            baseline=baseline,
            strict=strict_result,
            active_mode=active_mode,
            runtime=runtime,
            runtime_status=runtime_status,
            depth=depth,
            pages=pages,
            diff_modes=diff_policies(baseline.policy, strict_result.policy),
            headers=dict(self.recommended_headers),
            risk=risk,
            summaries={
                "baseline": summarize_directives(baseline.directives),
                "strict": summarize_directives(strict_result.directives),
            },
            crawl_outcomes=outcomes,
        )
