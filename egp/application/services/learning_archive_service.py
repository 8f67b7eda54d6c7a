"""Learning archive creation for adoptions.

After an adoption is stored, an archive skeleton is written next to it
so monitors and the community have a place to accumulate decisions,
monitoring data, stories and lessons over the trial.
"""

from __future__ import annotations

from egp.application.ports.content_store import ContentStoreProtocol
from egp.application.services.base import LoggingMixin
from egp.application.services.cancellation import CancellationToken
from egp.domain.models import Adoption, LearningArchive, StoredObject
from egp.domain.models.learning_archive import DEFAULT_ADMIN_ROLE

ARCHIVE_URI_PREFIX = "/ipfs/"


class LearningArchiveService(LoggingMixin):
    """Writes and pins learning archive skeletons."""

    def __init__(self, content_store: ContentStoreProtocol) -> None:
        self._store = content_store
        self._init_logger()

    def build(self, adoption: StoredObject[Adoption]) -> LearningArchive:
        """Assemble the archive skeleton for a stored adoption.

        Contributors are the adoption's monitors. The archive is
        administered by the adopter's DID, else the community council.
        """
        record = adoption.record
        monitors = record.monitoring.who if record.monitoring else ()
        admin = record.adopter.did if record.adopter and record.adopter.did else None
        return LearningArchive(
            timestamp=record.timestamp,
            node_id=record.node_id,
            protocol_version=record.protocol_version,
            adoption_id=adoption.id,
            proposal_id=record.proposal_context.id,
            sense_id=record.proposal_context.sense_id,
            contributors=tuple(monitors),
            admin_roles=(admin or DEFAULT_ADMIN_ROLE,),
        )

    async def create(
        self,
        adoption: StoredObject[Adoption],
        cancellation: CancellationToken | None = None,
    ) -> str:
        """Store and pin the archive for an adoption.

        Args:
            adoption: The stored adoption.
            cancellation: Optional token bounding the store calls.

        Returns:
            The archive reference, "/ipfs/{id}".

        Raises:
            StorageUnavailableError: If the store cannot be reached.
            OperationCancelledError: If the token fires.
        """
        archive = self.build(adoption)
        payload = archive.to_record()
        if cancellation is None:
            archive_id = await self._store.store(payload)
            await self._store.pin(archive_id)
        else:
            archive_id = await cancellation.run(
                "store_learning_archive", self._store.store(payload), adoption.id
            )
            await cancellation.run("pin_learning_archive", self._store.pin(archive_id), adoption.id)

        self._log_operation("create_learning_archive", adoption_id=adoption.id).info(
            "learning_archive_created", archive_id=archive_id
        )
        return f"{ARCHIVE_URI_PREFIX}{archive_id}"
