"""
This module contains the bot classifier plugin used by the commit aggregator.

An author is treated as automated when the source marks the account as a bot,
when the login is listed in the per-repository deny-list, or when the login,
name or email carry a well-known automation signature.
"""

import json
import os
import re
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from config import logger
from exceptions import ConfigurationError
from miners.models import CommitRecord


BOT_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\[bot\]",
        r"-bot(?=\s|@|$)",
        r"(?:^|\s)bot-",
        r"\bdependabot\b",
        r"\bgithub-actions\b",
        r"\brenovate\b",
        r"\bpre-commit-ci\b",
        r"\bsemantic-release\b",
        r"\bpercy\b",
        r"\bsnyk\b",
        r"\bauto[-_ ]?merge\b",
        r"\bautomation\b",
        r"\brelease[-_ ]?bot\b",
    )
]

_DENY_LIST_ADAPTER = TypeAdapter(Dict[str, List[str]])


def load_deny_list(path: Optional[str]) -> Mapping[str, FrozenSet[str]]:
    """
    Load the per-repository deny-list from a JSON file.

    The file maps repository slugs to logins that are always treated as bots:

        {"microsoft/playwright": ["playwright-bot-account"]}

    Args:
        path (Optional[str]): Location of the JSON file

    Returns:
        Mapping[str, FrozenSet[str]]: Read-only slug to logins mapping. Empty
            when no path is configured or the file does not exist.

    Raises:
        ConfigurationError: If the file cannot be parsed or has the wrong shape
    """
    if not path or not os.path.exists(path):
        logger.info({"message": "No bot deny-list file found", "path": path})
        return MappingProxyType({})

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        entries = _DENY_LIST_ADAPTER.validate_python(raw)
    except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
        raise ConfigurationError(f"Malformed bot deny-list {path}: {e}") from e

    deny_list = {}
    for slug, logins in entries.items():
        if not slug.strip() or any(not login.strip() for login in logins):
            raise ConfigurationError(
                f"Malformed bot deny-list {path}: blank entry for {slug!r}"
            )
        deny_list[slug] = frozenset(logins)

    logger.info(
        {
            "message": "Loaded bot deny-list",
            "path": path,
            "repositories": len(deny_list),
            "logins": sum(len(v) for v in deny_list.values()),
        }
    )
    return MappingProxyType(deny_list)


class BotClassifier:
    """
    Decides whether an author identity is automated.

    The deny-list is read-only for the lifetime of the classifier, so a single
    instance can be shared across all projects of a run.
    """

    def __init__(self, deny_list: Optional[Mapping[str, FrozenSet[str]]] = None):
        self.deny_list = MappingProxyType(
            {slug: frozenset(logins) for slug, logins in (deny_list or {}).items()}
        )

    def is_bot(
        self,
        login: Optional[str],
        display_name: Optional[str],
        email: Optional[str],
        repo_slug: str,
        account_is_bot: Optional[bool] = None,
    ) -> bool:
        if account_is_bot:
            return True

        # Deny-list matches are exact and case-sensitive
        if login and login in self.deny_list.get(repo_slug, ()):
            return True

        haystack = " ".join(part for part in (login, display_name, email) if part)
        if not haystack:
            return False
        return any(pattern.search(haystack) for pattern in BOT_PATTERNS)

    def is_commit_bot(self, commit: CommitRecord, repo_slug: str) -> bool:
        return self.is_bot(
            commit.author_login,
            commit.author_name,
            commit.author_email,
            repo_slug,
            account_is_bot=commit.author_is_bot,
        )
