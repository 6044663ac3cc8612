"""Document verification strategies."""
import random
from datetime import datetime, timezone
from typing import Optional, Protocol

from models.documents import Document
from schemas.documents import VerificationResult

MISSING_INFORMATION_ISSUE = "Missing required information"


class VerificationStrategy(Protocol):
    """Decides whether a document passes verification."""

    def verify(self, document: Document) -> VerificationResult:
        ...


class RandomVerificationStrategy:
    """
    Simulated verification for demos.

    Passes with probability ``pass_rate`` and draws an integer score in
    [0, 100). Failed runs carry a single "missing information" issue.
    """

    def __init__(self, pass_rate: float = 0.8, rng: Optional[random.Random] = None):
        self.pass_rate = pass_rate
        self.rng = rng or random.Random()

    def verify(self, document: Document) -> VerificationResult:
        verified = self.rng.random() < self.pass_rate
        return VerificationResult(
            verified=verified,
            score=self.rng.randrange(100),
            issues=[] if verified else [MISSING_INFORMATION_ISSUE],
            timestamp=datetime.now(timezone.utc),
        )


# Default strategy used by the API
default_verification_strategy = RandomVerificationStrategy()
