"""
Git reference resolution — map a symbolic version to a checked-out ref.

Upstream projects tag releases inconsistently (``1.2.0``, ``v1.2.0``,
``n7.1.2``), so a version is tried under several spellings.  For each
candidate, in priority order:

    1. tag:    shallow-fetch ``tag <ref>``, then checkout
               ``--detach tags/<ref>``, then ``--detach <ref>``
    2. branch: shallow-fetch ``<ref>``, then plain checkout

The first candidate for which either strategy succeeds wins.  When
every candidate fails, the outcome lists every attempt.

Tags get two checkout variants because hosting backends namespace
fetched tags differently.  Branches only get one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from buildprep.adapters.vcs.git import GitClient
from buildprep.core.models.checkout import CheckoutOutcome, RefAttempt

logger = logging.getLogger(__name__)


def collect_unique_refs(primary: str | None, fallbacks: Iterable | str | None = None) -> list[str]:
    """Ordered, de-duplicated candidate list.

    Values are trimmed; empty values are dropped; nested lists are
    flattened; the first occurrence of a ref wins.
    """
    refs: list[str] = []
    seen: set[str] = set()

    def enqueue(value) -> None:
        if value is None:
            return
        if isinstance(value, (list, tuple)):
            for entry in value:
                enqueue(entry)
            return
        text = str(value).strip()
        if not text or text in seen:
            return
        seen.add(text)
        refs.append(text)

    enqueue(primary)
    enqueue(fallbacks)
    return refs


def derive_fallback_refs(version: str | None, prefix: str = "v") -> list[str]:
    """The alternate spelling of ``version``: prefix removed or added.

    ``derive_fallback_refs("v1.2")`` → ``["1.2"]``;
    ``derive_fallback_refs("7.1.2", "n")`` → ``["n7.1.2"]``.
    """
    text = (version or "").strip()
    if not text or not prefix:
        return []
    if text.startswith(prefix):
        stripped = text[len(prefix):]
        return [stripped] if stripped else []
    return [f"{prefix}{text}"]


def _try_tag(git: GitClient, repo_path: Path, ref: str) -> RefAttempt | None:
    """Tag strategy; returns the failed attempt, or None on success."""
    fetch = git.fetch_tag(repo_path, ref)
    if not fetch.ok:
        return RefAttempt(ref=ref, ref_type="tag", step="fetch", output=fetch.output)

    outputs: list[str] = []
    for variant in (f"tags/{ref}", ref):
        checkout = git.checkout(repo_path, variant, detach=True)
        if checkout.ok:
            return None
        outputs.append(checkout.output)

    return RefAttempt(
        ref=ref,
        ref_type="tag",
        step="checkout",
        output="\n".join(o for o in outputs if o),
    )


def _try_branch(git: GitClient, repo_path: Path, ref: str) -> RefAttempt | None:
    """Branch strategy; returns the failed attempt, or None on success."""
    fetch = git.fetch_branch(repo_path, ref)
    if not fetch.ok:
        return RefAttempt(ref=ref, ref_type="branch", step="fetch", output=fetch.output)

    checkout = git.checkout(repo_path, ref)
    if checkout.ok:
        return None
    return RefAttempt(ref=ref, ref_type="branch", step="checkout", output=checkout.output)


def resolve_git_ref(
    git: GitClient,
    repo_path: Path,
    primary: str | None,
    fallbacks: Iterable[str] | None = None,
) -> CheckoutOutcome:
    """Check out the first candidate ref that resolves as a tag or branch.

    Args:
        git: Git client bound to a runner.
        repo_path: Local clone.
        primary: The requested version.
        fallbacks: Alternate spellings, tried after ``primary``.

    Returns:
        ``CheckoutOutcome``.  ``skipped`` when no ref was requested.

    Raises:
        ValueError: If ``repo_path`` is missing.
    """
    if not repo_path:
        raise ValueError("resolve_git_ref requires a repository path")

    candidates = collect_unique_refs(primary, list(fallbacks or []))
    if not candidates:
        return CheckoutOutcome(ok=True, skipped=True, reason="no reference provided")

    logger.info(
        "Resolving git reference in %s: %s", repo_path, ", ".join(candidates)
    )
    attempts: list[RefAttempt] = []

    for ref in candidates:
        failed = _try_tag(git, repo_path, ref)
        if failed is None:
            logger.info("Checked out tag %s", ref)
            return CheckoutOutcome(ok=True, ref=ref, ref_type="tag", attempts=attempts)
        attempts.append(failed)

        failed = _try_branch(git, repo_path, ref)
        if failed is None:
            logger.info("Checked out branch %s", ref)
            return CheckoutOutcome(ok=True, ref=ref, ref_type="branch", attempts=attempts)
        attempts.append(failed)

        logger.debug("Ref %s did not resolve as tag or branch", ref)

    logger.warning(
        "No candidate ref resolved in %s (%d attempts)", repo_path, len(attempts)
    )
    return CheckoutOutcome(ok=False, attempts=attempts)
