# feature_board/voting/ledger.py
"""
Authoritative per-(user, item) vote membership.

The vote count of an item is always the size of its membership set, so a
toggle can never leave the count and the voter list disagreeing.
"""

import logging
import threading
from typing import Dict, Iterable, List

from feature_board.config import constants
from feature_board.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class VoteLedger:
    """In-process vote ledger with one lock per item."""

    def __init__(self):
        # dicts keep voter insertion order
        self._members: Dict[str, Dict[str, None]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def register(self, feedback_id: str, voters: Iterable[str] = ()) -> None:
        """
        Make an item known to the ledger.

        Args:
            feedback_id: Item identifier
            voters: Existing voters (duplicates and blanks are dropped)
        """
        with self._registry_lock:
            self._members[feedback_id] = dict.fromkeys(
                v for v in voters if isinstance(v, str) and v.strip()
            )
            self._locks[feedback_id] = threading.Lock()

    def __contains__(self, feedback_id: str) -> bool:
        return feedback_id in self._members

    def toggle(self, feedback_id: str, user_id: str) -> bool:
        """
        Cast or withdraw a user's vote depending on current membership.

        Args:
            feedback_id: Item identifier
            user_id: Stable voter identifier (the product uses email)

        Returns:
            True if a vote was cast, False if an existing vote was withdrawn.

        Raises:
            ValidationError: user_id is empty
            NotFoundError: feedback_id is not registered
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError({"userId": constants.VOTE_IDS_REQUIRED})

        with self._lock_for(feedback_id):
            members = self._members[feedback_id]
            if user_id in members:
                del members[user_id]
                logger.debug(f"Vote withdrawn on {feedback_id} by {user_id}")
                return False
            members[user_id] = None
            logger.debug(f"Vote cast on {feedback_id} by {user_id}")
            return True

    def voters(self, feedback_id: str) -> List[str]:
        with self._lock_for(feedback_id):
            return list(self._members[feedback_id])

    def count(self, feedback_id: str) -> int:
        with self._lock_for(feedback_id):
            return len(self._members[feedback_id])

    def has_voted(self, feedback_id: str, user_id: str) -> bool:
        with self._lock_for(feedback_id):
            return user_id in self._members[feedback_id]

    def _lock_for(self, feedback_id: str) -> threading.Lock:
        lock = self._locks.get(feedback_id)
        if lock is None:
            raise NotFoundError(constants.FEEDBACK_NOT_FOUND, entity_id=feedback_id)
        return lock
