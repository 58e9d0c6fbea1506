"""Result cache entry model."""

from pydantic import BaseModel, ConfigDict, Field

from .findings import Finding


class CacheEntry(BaseModel):
    """A cached finding list keyed by content hash.

    ``timestamp`` is the insertion time in epoch seconds and ``ttl`` the
    lifetime in seconds. This is also the persisted snapshot record format.
    """

    model_config = ConfigDict(frozen=True)

    hash: str = Field(..., min_length=1, description="Content digest")
    findings: list[Finding] = Field(default_factory=list, description="Finding snapshot")
    timestamp: float = Field(..., description="Creation time (epoch seconds)")
    ttl: float = Field(..., gt=0, description="Time to live (seconds)")

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl
