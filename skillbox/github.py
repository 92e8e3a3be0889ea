"""GitHub repository references and URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

DEFAULT_REF = "main"
FALLBACK_REF = "master"

_TREE_URL_RE = re.compile(
    r"^https?://github\.com/([^/]+)/([^/]+)/tree/([^/]+)/(.+?)/?$", re.IGNORECASE
)
_TREE_ROOT_URL_RE = re.compile(
    r"^https?://github\.com/([^/]+)/([^/]+)/tree/([^/]+)/?$", re.IGNORECASE
)
_REPO_URL_RE = re.compile(
    r"^https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$", re.IGNORECASE
)
_SHORTHAND_RE = re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$")


@dataclass(frozen=True)
class RepoRef:
    """A GitHub repository at a ref, optionally narrowed to a sub path."""

    owner: str
    repo: str
    ref: str = DEFAULT_REF
    path: str | None = None

    def with_ref(self, ref: str) -> RepoRef:
        return replace(self, ref=ref)

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_ref(value: str) -> RepoRef | None:
    """Parse a repository reference.

    Accepted forms:
        https://github.com/owner/repo/tree/<ref>/<path>
        https://github.com/owner/repo(.git)
        owner/repo

    Returns:
        RepoRef, or None if the input is not a repository reference.
    """
    value = value.strip()

    match = _TREE_URL_RE.match(value)
    if match:
        owner, repo, ref, path = match.groups()
        return RepoRef(owner=owner, repo=repo, ref=ref, path=path.strip("/"))

    match = _TREE_ROOT_URL_RE.match(value)
    if match:
        owner, repo, ref = match.groups()
        return RepoRef(owner=owner, repo=repo, ref=ref)

    match = _REPO_URL_RE.match(value)
    if match:
        owner, repo = match.groups()
        return RepoRef(owner=owner, repo=repo)

    if "://" not in value:
        match = _SHORTHAND_RE.match(value)
        if match:
            owner, repo = match.groups()
            return RepoRef(owner=owner, repo=repo.removesuffix(".git"))

    return None


def is_repo_input(value: str) -> bool:
    return parse_repo_ref(value) is not None


def build_raw_url(ref: RepoRef, file_path: str) -> str:
    return f"https://raw.githubusercontent.com/{ref.owner}/{ref.repo}/{ref.ref}/{file_path}"


def build_tree_url(ref: RepoRef) -> str:
    return (
        f"https://api.github.com/repos/{ref.owner}/{ref.repo}"
        f"/git/trees/{ref.ref}?recursive=1"
    )
