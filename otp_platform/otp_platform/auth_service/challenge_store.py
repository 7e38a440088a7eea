"""
In-memory store of pending OTP challenges, keyed by email.

The store is process-local: a deployment running several worker
processes will fail verification whenever the verifying request lands on
a different process than the one that issued the code. Run a single
worker, or replace this class with a shared key-value store that has
per-key expiry and atomic delete-on-read.

Nothing is swept in the background. Callers check ``expires_at`` when
reading; abandoned challenges stay in memory until the process restarts
or the same email starts a new flow.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional
import threading


@dataclass
class Challenge:
    email: str
    otp: str
    expires_at: datetime
    # Set only for signup challenges; the user row is created on verification
    password: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_signup(self) -> bool:
        return self.password is not None and self.name is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class ChallengeStore:
    def __init__(self):
        self._challenges: Dict[str, Challenge] = {}
        self._lock = threading.Lock()

    def put(self, email: str, challenge: Challenge) -> None:
        """Replace any existing challenge for ``email``."""
        with self._lock:
            self._challenges[email] = challenge

    def get(self, email: str) -> Optional[Challenge]:
        with self._lock:
            return self._challenges.get(email)

    def delete(self, email: str) -> None:
        with self._lock:
            self._challenges.pop(email, None)

    def pop(self, email: str) -> Optional[Challenge]:
        """Read and remove the challenge for ``email`` in one step."""
        with self._lock:
            return self._challenges.pop(email, None)

    def clear(self) -> None:
        with self._lock:
            self._challenges.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._challenges)

    def __contains__(self, email: str) -> bool:
        with self._lock:
            return email in self._challenges


challenge_store = ChallengeStore()


def get_challenge_store() -> ChallengeStore:
    return challenge_store
