"""
Remote data service interface.

The remote service is consumed as an opaque "insert a record" operation
plus a lightweight probe. Transports never raise for service-side
rejections; they describe them in an InsertResult instead.
"""

from typing import Protocol, runtime_checkable

from lead_capture.domain.models import InsertResult, SubmissionRecord


@runtime_checkable
class RemoteStore(Protocol):
    """Protocol for remote data service transports."""

    @property
    def is_configured(self) -> bool:
        """Whether real credentials and an endpoint are available."""
        ...

    async def insert(self, record: SubmissionRecord) -> InsertResult:
        """Insert one record keyed by its id."""
        ...

    async def probe(self) -> bool:
        """Run a cheap read against the service; True when it answered."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...
