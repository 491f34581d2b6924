"""Who may request builds, and which comments count as commands.

Phrases are regular expressions matched against the whole comment body,
case-insensitively and across lines. Admins count as whitelisted.
"""

import logging
import re
import threading
from typing import Iterable

from prwatch.config import TriggerConfig

LOG = logging.getLogger("prwatch.policy")

_PHRASE_FLAGS = re.IGNORECASE | re.DOTALL


class AuthorizationPolicy:
    """Admin set, whitelist and trigger phrases."""

    def __init__(
        self,
        admins: Iterable[str] = (),
        whitelist: Iterable[str] = (),
        added: Iterable[str] = (),
        whitelist_phrase: str = r".*add\W+to\W+whitelist.*",
        ok_to_test_phrase: str = r".*ok\W+to\W+test.*",
        retest_phrase: str = r".*test\W+this\W+please.*",
        request_for_testing_phrase: str = "Can one of the admins verify this patch?",
    ) -> None:
        self._admins = {a for a in admins if a}
        self._whitelist = {w for w in whitelist if w}
        # Runtime additions; only these are persisted
        self._added = {w for w in added if w} - self._whitelist
        self._lock = threading.Lock()
        self._whitelist_re = re.compile(whitelist_phrase, _PHRASE_FLAGS)
        self._ok_to_test_re = re.compile(ok_to_test_phrase, _PHRASE_FLAGS)
        self._retest_re = re.compile(retest_phrase, _PHRASE_FLAGS)
        self.request_for_testing_phrase = request_for_testing_phrase

    @classmethod
    def from_config(cls, config: TriggerConfig, extra_whitelist: Iterable[str] = ()) -> "AuthorizationPolicy":
        """Build policy from the trigger section; extra_whitelist holds persisted additions."""
        return cls(
            admins=config.admins,
            whitelist=config.whitelist,
            added=extra_whitelist,
            whitelist_phrase=config.whitelist_phrase,
            ok_to_test_phrase=config.ok_to_test_phrase,
            retest_phrase=config.retest_phrase,
            request_for_testing_phrase=config.request_for_testing_phrase,
        )

    def is_admin(self, sender: str) -> bool:
        return sender in self._admins

    def is_whitelisted(self, login: str) -> bool:
        with self._lock:
            return login in self._whitelist or login in self._added or login in self._admins

    def add_to_whitelist(self, login: str) -> bool:
        """Add login to whitelist. Returns False if it was already there."""
        with self._lock:
            if login in self._whitelist or login in self._added:
                return False
            self._added.add(login)
        LOG.info("Added %s to whitelist", login)
        return True

    def added_logins(self) -> list[str]:
        """Sorted logins added at runtime (configured whitelist and admins not included)."""
        with self._lock:
            return sorted(self._added)

    def is_whitelist_phrase(self, body: str) -> bool:
        return self._whitelist_re.fullmatch(body or "") is not None

    def is_ok_to_test_phrase(self, body: str) -> bool:
        return self._ok_to_test_re.fullmatch(body or "") is not None

    def is_retest_phrase(self, body: str) -> bool:
        return self._retest_re.fullmatch(body or "") is not None
