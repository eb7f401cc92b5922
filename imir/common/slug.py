"""Slug and repository identifier utilities.

Two kinds of identifiers circulate through imir:

* **Target slugs** such as ``octocat-hello-world``. They contain only
  lowercase ASCII letters and digits separated by single dashes, which keeps
  them safe for filenames and branch names on every platform.
* **Repository slugs** in GitHub ``owner/name`` notation. These are not
  filesystem paths even though they use ``/``; parse them with
  :func:`parse_repo_slug` rather than ``pathlib``.
"""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from imir.targets.models import TargetKind

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_SEPARATOR_RUN = re.compile(r"[^a-z0-9]+")


def slugify_text(value: str) -> str:
    """Reduce arbitrary text to slug form.

    Parameters
    ----------
    value:
        Source text, for example a repository name or a slug override.

    Returns
    -------
    str
        The slug, or an empty string when ``value`` holds no ASCII letters or
        digits.

    Examples
    --------
    >>> slugify_text("  Multi--Separator__Value  ")
    'multi-separator-value'
    >>> slugify_text("***")
    ''

    """
    return _SEPARATOR_RUN.sub("-", value.lower()).strip("-")


def slugify(owner: str, repository: str | None, kind: TargetKind) -> str:
    """Derive the default slug for a target.

    Profiles are identified by their owner alone; repository targets join
    owner and repository with a dash before reduction.

    Examples
    --------
    >>> from imir.targets.models import TargetKind
    >>> slugify("octocat", None, TargetKind.PROFILE)
    'octocat'
    >>> slugify("Octo.Cat", "Hello_World", TargetKind.OPEN_SOURCE)
    'octo-cat-hello-world'

    """
    if kind.requires_repository and repository is not None:
        return slugify_text(f"{owner}-{repository}")
    return slugify_text(owner)


def is_valid_slug(value: str) -> bool:
    """Return ``True`` when ``value`` is already in canonical slug form."""
    return SLUG_PATTERN.fullmatch(value) is not None


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug in ``owner/name`` notation.

    >>> repo_slug("octocat", "hello-world")
    'octocat/hello-world'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` repository slug.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    >>> parse_repo_slug("octocat/hello-world")
    ('octocat', 'hello-world')

    """
    owner, sep, name = slug.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)
    return owner, name
