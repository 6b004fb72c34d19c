"""Content-Security-Policy synthesis from a resource manifest."""
import base64
import hashlib
import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from core.policy_diff import diff_policies
from models.manifest import ResourceManifest
from models.policy import DirectiveSet, DirectiveSummary, PolicyResult
from models.rubric import FloorDirective
from rules.rules_loader import load_policy_floor

logger = logging.getLogger(__name__)

SELF = "'self'"
DATA = "data:"
WILDCARD = "*"

HASH_TOKEN_PATTERN = re.compile(r"^'sha256-")
ORIGIN_TOKEN_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

# Directives reduced to 'self' plus hashes in strict mode
STRICT_DIRECTIVES = ("script-src", "style-src")

STRICT_NOTE = "Strict mode: external script/style origins removed; only self + hashes allowed."
DIFF_NOTE = "Diff computed vs existing CSP."


def hash_source(content: str) -> str:
    """CSP hash source for inline code: 'sha256-<base64 digest>' over the exact text."""
    digest = hashlib.sha256(content.encode("utf-8")).digest()
    return f"'sha256-{base64.b64encode(digest).decode('ascii')}'"


def _source_list(origins: Iterable[str], inline_blocks: Iterable[str]) -> List[str]:
    tokens = [SELF]
    tokens.extend(origins)
    tokens.extend(hash_source(block) for block in inline_blocks)
    return tokens


def tighten_to_hashes(directives: DirectiveSet, name: str) -> None:
    """Keep only 'self' and hash tokens in a directive, dropping every origin."""
    tokens = directives.get(name)
    if tokens is None:
        return
    kept = [SELF] if SELF in tokens else []
    kept.extend(t for t in tokens if HASH_TOKEN_PATTERN.match(t))
    directives.set(name, kept)


def serialize_directives(directives: DirectiveSet) -> str:
    """Render directives as 'name token ...' clauses joined by '; '."""
    clauses = []
    for name, tokens in directives.items():
        clauses.append(f"{name} {' '.join(tokens)}" if tokens else name)
    return "; ".join(clauses)


def build_policy(
    manifest: ResourceManifest,
    strict: bool = False,
    existing: Optional[str] = None,
    floor: Optional[Sequence[FloorDirective]] = None,
) -> PolicyResult:
    """
    Build a CSP from discovered resources.

    Args:
        manifest: Aggregated resources of the analyzed page(s)
        strict: Reduce script-src/style-src to 'self' plus hashes
        existing: Policy currently served by the site, diffed when given
        floor: Hardening directives to start from (default: policy_floor.yaml)

    Returns:
        PolicyResult with the serialized policy, its directives, optional
        diff against existing and explanatory notes
    """
    notes: List[str] = []
    directives = DirectiveSet()

    for entry in floor if floor is not None else load_policy_floor():
        directives.set(entry.directive, entry.sources)

    directives.set("script-src", _source_list(manifest.external_script_origins, manifest.inline_scripts))
    directives.set("style-src", _source_list(manifest.external_style_origins, manifest.inline_styles))
    directives.set("img-src", [SELF, DATA, *manifest.image_origins])
    if manifest.font_origins:
        directives.set("font-src", [SELF, *manifest.font_origins])
    # connect-src is always present; static discovery only sees connection hints
    directives.set("connect-src", [SELF, *manifest.connect_origins])
    directives.set("upgrade-insecure-requests")

    if strict:
        for name in STRICT_DIRECTIVES:
            tighten_to_hashes(directives, name)
        notes.append(STRICT_NOTE)

    policy = serialize_directives(directives)
    diff = None
    if existing:
        diff = diff_policies(existing, policy)
        if not diff.is_empty():
            notes.append(DIFF_NOTE)

    logger.debug(f"Built {'strict' if strict else 'baseline'} policy with {len(directives)} directives")
    return PolicyResult(policy=policy, directives=directives, diff=diff, notes=notes)


def summarize_directives(directives: DirectiveSet) -> Dict[str, DirectiveSummary]:
    """Count hash, origin and wildcard tokens per directive."""
    summary: Dict[str, DirectiveSummary] = {}
    for name, tokens in directives.items():
        summary[name] = DirectiveSummary(
            sources=len(tokens),
            hashes=sum(1 for t in tokens if HASH_TOKEN_PATTERN.match(t)),
            origins=sum(1 for t in tokens if ORIGIN_TOKEN_PATTERN.match(t)),
            wildcards=sum(1 for t in tokens if t == WILDCARD),
        )
    return summary
