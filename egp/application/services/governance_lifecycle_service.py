"""Governance lifecycle service: sense, propose, adopt.

Orchestrates the sense -> propose -> adopt chain over the content store:

- sense(): record a systemic signal, optionally with a validity window.
- propose(): resolve the referenced sense, gate on its validity, compute
  the sunset date, persist the proposal and its responds_to edge.
- adopt(): resolve the referenced proposal, gate on its sunset, compute
  the trial period, persist the adoption and its adopts (and modifies)
  edges, then derive a review schedule, revocation conditions and a
  learning archive.
- resolve(): read a stored object back with its effective status.

Write Ordering:
    Within one request every store call is sequential: object, pin,
    edge, pin. The store has no transactions and no delete, so nothing
    is rolled back. When an edge write fails after its object was
    stored, PartialLinkFailureError reports the object id so the caller
    knows the record exists.

Best-effort steps:
    Index updates, advisors and the learning archive never fail a
    request. Each runs under a time bound; a failure is logged as
    advisor_degraded, counted, and named in the result's degraded list.

Cancellation:
    Every store call runs under the optional CancellationToken. When it
    fires the pending call is cancelled and OperationCancelledError is
    raised.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

from egp.application.dtos.governance_inputs import AdoptInput, ProposeInput, SenseInput
from egp.application.dtos.governance_results import (
    AdoptionResult,
    ProposalResult,
    ResolvedObject,
    SenseResult,
)
from egp.application.ports.advisors import (
    ActionSuggesterProtocol,
    ConflictDetectorProtocol,
    RitualSuggesterProtocol,
    SimilarityFinderProtocol,
)
from egp.application.ports.content_store import ContentStoreProtocol
from egp.application.ports.governance_index import GovernanceIndexProtocol
from egp.application.ports.time_authority import TimeAuthorityProtocol
from egp.application.services.action_suggestion_service import RuleBasedActionSuggester
from egp.application.services.base import LoggingMixin
from egp.application.services.cancellation import CancellationToken
from egp.application.services.conflict_detection_service import RuleBasedConflictDetector
from egp.application.services.learning_archive_service import LearningArchiveService
from egp.application.services.ritual_suggestion_service import ScopeRitualSuggester
from egp.application.services.schedule_service import (
    generate_review_schedule,
    generate_revocation_conditions,
)
from egp.application.services.similarity_service import OverlapSimilarityFinder
from egp.config.governance_config import GovernanceConfig
from egp.domain.errors import (
    InvalidDurationError,
    MalformedRecordError,
    OperationCancelledError,
    PartialLinkFailureError,
    ReferenceExpiredError,
    ReferenceNotFoundError,
    StorageUnavailableError,
)
from egp.domain.exceptions import GovernanceError
from egp.domain.models import (
    Adoption,
    Duration,
    GovernanceObject,
    ObjectType,
    Proposal,
    ProposalContext,
    Relationship,
    RelationshipType,
    Sense,
    SenseContext,
    StoredObject,
    TrialPeriod,
    object_uri,
    parse_object_uri,
)
from egp.domain.models.governance_object import PROTOCOL_KINDS

if TYPE_CHECKING:
    import structlog

    from egp.infrastructure.monitoring.metrics import GovernanceMetrics

T = TypeVar("T")
RecordT = TypeVar("RecordT", bound=GovernanceObject)

RECORD_TYPES: dict[ObjectType, type[GovernanceObject]] = {
    ObjectType.SENSE: Sense,
    ObjectType.PROPOSE: Proposal,
    ObjectType.ADOPT: Adoption,
}

ADVISOR_INDEX = "governance_index"
ADVISOR_SIMILARITY = "similarity_finder"
ADVISOR_ACTIONS = "action_suggester"
ADVISOR_CONFLICTS = "conflict_detector"
ADVISOR_RITUALS = "ritual_suggester"
ADVISOR_ARCHIVE = "learning_archive"


class GovernanceLifecycleService(LoggingMixin):
    """Runs the sense -> propose -> adopt lifecycle.

    All collaborators are injected. The service holds no locks and no
    per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        content_store: ContentStoreProtocol,
        governance_index: GovernanceIndexProtocol,
        time_authority: TimeAuthorityProtocol,
        config: GovernanceConfig | None = None,
        *,
        conflict_detector: ConflictDetectorProtocol | None = None,
        similarity_finder: SimilarityFinderProtocol | None = None,
        ritual_suggester: RitualSuggesterProtocol | None = None,
        action_suggester: ActionSuggesterProtocol | None = None,
        learning_archives: LearningArchiveService | None = None,
        metrics: GovernanceMetrics | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            content_store: Content-addressed object store.
            governance_index: Read view used by advisors and resolve().
            time_authority: Clock for timestamps and sunset gates.
            config: Lifecycle limits and node identity (defaults if None).
            conflict_detector: Defaults to RuleBasedConflictDetector.
            similarity_finder: Defaults to OverlapSimilarityFinder.
            ritual_suggester: Defaults to ScopeRitualSuggester.
            action_suggester: Defaults to RuleBasedActionSuggester.
            learning_archives: Defaults to a LearningArchiveService on the store.
            metrics: Optional Prometheus counters.
        """
        self._store = content_store
        self._index = governance_index
        self._time = time_authority
        self._config = config or GovernanceConfig()
        self._conflicts = conflict_detector or RuleBasedConflictDetector(governance_index)
        self._similarity = similarity_finder or OverlapSimilarityFinder(
            governance_index, threshold=self._config.similarity_threshold
        )
        self._rituals = ritual_suggester or ScopeRitualSuggester()
        self._actions = action_suggester or RuleBasedActionSuggester()
        self._archives = learning_archives or LearningArchiveService(content_store)
        self._metrics = metrics
        self._init_logger(node_id=self._config.node_id)

    # =========================================================================
    # Lifecycle operations
    # =========================================================================

    async def sense(
        self,
        sense_input: SenseInput,
        request_metadata: dict[str, Any] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> SenseResult:
        """Record a systemic signal.

        Args:
            sense_input: Validated input.
            request_metadata: Transport details captured at intake.
            cancellation: Optional cancellation token.

        Returns:
            SenseResult with related signals and suggested actions.

        Raises:
            InvalidDurationError: If valid_for is zero or beyond the ceiling.
            StorageUnavailableError: If the store cannot be reached.
            OperationCancelledError: If the token fires.
        """
        try:
            return await self._sense(sense_input, request_metadata, cancellation)
        except GovernanceError as exc:
            self._record_failure("sense", exc)
            raise

    async def propose(
        self,
        proposal_input: ProposeInput,
        cancellation: CancellationToken | None = None,
    ) -> ProposalResult:
        """Offer a solution to a sense.

        Args:
            proposal_input: Validated input.
            cancellation: Optional cancellation token.

        Returns:
            ProposalResult with sunset date, edge id and advisor output.

        Raises:
            ReferenceNotFoundError: If the sense is absent, of another kind
                or unreadable.
            ReferenceExpiredError: If the sense's validity window lapsed.
            InvalidDurationError: If the sunset is zero or beyond the ceiling.
            StorageUnavailableError: If the proposal could not be stored.
            PartialLinkFailureError: If the responds_to edge could not be stored.
            OperationCancelledError: If the token fires.
        """
        try:
            return await self._propose(proposal_input, cancellation)
        except GovernanceError as exc:
            self._record_failure("propose", exc)
            raise

    async def adopt(
        self,
        adoption_input: AdoptInput,
        cancellation: CancellationToken | None = None,
    ) -> AdoptionResult:
        """Commit to trial a proposal.

        Args:
            adoption_input: Validated input.
            cancellation: Optional cancellation token.

        Returns:
            AdoptionResult with trial period, review dates, revocation
            conditions, edge ids and learning archive reference.

        Raises:
            ReferenceNotFoundError: If the proposal is absent, of another
                kind or unreadable.
            ReferenceExpiredError: If the proposal's sunset has passed.
            InvalidDurationError: If modifications.sunset or
                monitoring.frequency is unusable.
            StorageUnavailableError: If the adoption could not be stored.
            PartialLinkFailureError: If an edge could not be stored.
            OperationCancelledError: If the token fires.
        """
        try:
            return await self._adopt(adoption_input, cancellation)
        except GovernanceError as exc:
            self._record_failure("adopt", exc)
            raise

    async def resolve(
        self,
        kind: ObjectType | str,
        object_id: str,
        cancellation: CancellationToken | None = None,
    ) -> ResolvedObject:
        """Read a stored sense, proposal or adoption.

        The effective status is recomputed from the clock: proposals
        past their sunset read as expired, proposals with a known
        adoption read as adopted.

        Raises:
            ValueError: If kind is not sense, propose or adopt.
            ReferenceNotFoundError: If the object is absent or of another kind.
            StorageUnavailableError: If the store cannot be reached.
        """
        object_type = ObjectType(kind)
        if object_type not in PROTOCOL_KINDS:
            raise ValueError(f"{object_type.value!r} objects cannot be resolved")

        uri = object_uri(object_type, object_id)
        stored = await self._resolve(uri, object_type, RECORD_TYPES[object_type], cancellation)
        now = self._time.utcnow()

        record = stored.record
        if isinstance(record, Proposal):
            adoptions = await self._index.adoptions_for_proposal(stored.id)
            status = record.effective_status(now, adopted=bool(adoptions)).value
        elif isinstance(record, Adoption):
            status = record.effective_status(now).value
        else:
            status = "expired" if record.is_expired(now) else "active"  # type: ignore[attr-defined]

        return ResolvedObject(
            id=stored.id, kind=object_type, record=record, effective_status=status
        )

    # =========================================================================
    # Operation bodies
    # =========================================================================

    async def _sense(
        self,
        sense_input: SenseInput,
        request_metadata: dict[str, Any] | None,
        cancellation: CancellationToken | None,
    ) -> SenseResult:
        log = self._log_operation("sense", issue=sense_input.issue, scope=sense_input.scope)
        now = self._time.utcnow()

        expires_at = None
        if sense_input.valid_for is not None:
            expires_at = self._end_of_span("valid_for", sense_input.valid_for, now)

        sense = Sense(
            timestamp=now,
            node_id=self._config.node_id,
            protocol_version=self._config.protocol_version,
            issue=sense_input.issue,
            scope=sense_input.scope,
            title=sense_input.title,
            evidence=sense_input.evidence,
            urgency=sense_input.urgency,
            tags=tuple(sense_input.tags),
            reporter=sense_input.reporter.to_domain() if sense_input.reporter else None,
            metadata=sense_input.metadata,
            request_metadata=request_metadata,
            expires_at=expires_at,
        )
        sense_id = await self._persist(sense, cancellation)
        stored = StoredObject(sense_id, sense)
        log = log.bind(sense_id=sense_id)
        log.info("sense_persisted")

        degraded: list[str] = []
        await self._advise(ADVISOR_INDEX, lambda: self._index.record(stored), None, degraded, log)
        related = await self._advise(
            ADVISOR_SIMILARITY, lambda: self._similarity.related_senses(stored), [], degraded, log
        )
        actions = await self._advise(
            ADVISOR_ACTIONS, lambda: self._actions.suggest(sense, related), {}, degraded, log
        )

        log.info("sense_completed", echoes=len(related), degraded=degraded)
        return SenseResult(
            id=sense_id,
            timestamp=now,
            related=tuple(related),
            actions=dict(actions),
            degraded=tuple(degraded),
        )

    async def _propose(
        self,
        proposal_input: ProposeInput,
        cancellation: CancellationToken | None,
    ) -> ProposalResult:
        uri = proposal_input.in_response_to
        log = self._log_operation("propose", in_response_to=uri)
        now = self._time.utcnow()

        sense = await self._resolve(uri, ObjectType.SENSE, Sense, cancellation)
        if sense.record.is_expired(now):
            log.info("referenced_sense_expired", expires_at=str(sense.record.expires_at))
            raise ReferenceExpiredError(uri, sense.record.expires_at)  # type: ignore[arg-type]

        sunset_date = self._end_of_span("sunset", proposal_input.sunset, now)

        proposal = Proposal(
            timestamp=now,
            node_id=self._config.node_id,
            protocol_version=self._config.protocol_version,
            title=proposal_input.title,
            in_response_to=uri,
            solution=proposal_input.solution.to_domain(),
            test=proposal_input.test,
            sunset=proposal_input.sunset,
            sunset_date=sunset_date,
            sense_context=SenseContext(
                id=sense.id,
                issue=sense.record.issue,
                scope=sense.record.scope,
                urgency=sense.record.urgency,
            ),
            resources=proposal_input.resources.to_domain() if proposal_input.resources else None,
            proposer=proposal_input.proposer.to_domain() if proposal_input.proposer else None,
            metadata=proposal_input.metadata,
        )
        proposal_id = await self._persist(proposal, cancellation)
        log = log.bind(proposal_id=proposal_id)
        log.info("proposal_persisted", sunset_date=sunset_date.isoformat())

        relationship_id = await self._link(
            ObjectType.PROPOSE,
            proposal_id,
            sense.id,
            RelationshipType.RESPONDS_TO,
            {},
            now,
            cancellation,
        )
        stored = StoredObject(proposal_id, proposal)

        degraded: list[str] = []
        await self._advise(ADVISOR_INDEX, lambda: self._index.record(stored), None, degraded, log)
        conflicts = await self._advise(
            ADVISOR_CONFLICTS, lambda: self._conflicts.detect(stored, sense), [], degraded, log
        )
        rituals = await self._advise(
            ADVISOR_RITUALS, lambda: self._rituals.suggest(proposal, sense.record), {}, degraded, log
        )
        similar = await self._advise(
            ADVISOR_SIMILARITY,
            lambda: self._similarity.similar_proposals(stored),
            [],
            degraded,
            log,
        )

        log.info(
            "proposal_completed",
            conflicts=len(conflicts),
            echoes=len(similar),
            degraded=degraded,
        )
        return ProposalResult(
            id=proposal_id,
            timestamp=now,
            sunset_date=sunset_date,
            relationship_id=relationship_id,
            similar=tuple(similar),
            conflicts=tuple(conflicts),
            rituals=dict(rituals),
            degraded=tuple(degraded),
        )

    async def _adopt(
        self,
        adoption_input: AdoptInput,
        cancellation: CancellationToken | None,
    ) -> AdoptionResult:
        uri = adoption_input.proposal_uri
        log = self._log_operation("adopt", proposal_uri=uri)
        now = self._time.utcnow()

        proposal = await self._resolve(uri, ObjectType.PROPOSE, Proposal, cancellation)
        if proposal.record.is_expired(now):
            log.info("referenced_proposal_expired", sunset_date=proposal.record.sunset_date.isoformat())
            raise ReferenceExpiredError(uri, proposal.record.sunset_date)

        modifications = (
            adoption_input.modifications.to_domain() if adoption_input.modifications else None
        )
        monitoring = adoption_input.monitoring.to_domain() if adoption_input.monitoring else None

        ends = proposal.record.sunset_date
        if modifications is not None and modifications.sunset is not None:
            ends = self._end_of_span("modifications.sunset", modifications.sunset, now)
        if monitoring is not None:
            self._require_span("monitoring.frequency", monitoring.frequency)

        adoption = Adoption(
            timestamp=now,
            node_id=self._config.node_id,
            protocol_version=self._config.protocol_version,
            proposal_uri=uri,
            decision_process=adoption_input.decision_process.to_domain(),
            trial_period=TrialPeriod(
                starts=now, ends=ends, original_sunset=proposal.record.sunset_date
            ),
            proposal_context=ProposalContext(
                id=proposal.id,
                title=proposal.record.title,
                sense_id=proposal.record.sense_context.id,
                original_test=proposal.record.test,
            ),
            modifications=modifications,
            monitoring=monitoring,
            adopter=adoption_input.adopter.to_domain() if adoption_input.adopter else None,
            metadata=adoption_input.metadata,
        )
        adoption_id = await self._persist(adoption, cancellation)
        log = log.bind(adoption_id=adoption_id)
        log.info("adoption_persisted", trial_ends=ends.isoformat())

        relationship_ids: dict[str, str] = {}
        relationship_ids[RelationshipType.ADOPTS.value] = await self._link(
            ObjectType.ADOPT,
            adoption_id,
            proposal.id,
            RelationshipType.ADOPTS,
            relationship_ids,
            now,
            cancellation,
        )
        if modifications is not None:
            relationship_ids[RelationshipType.MODIFIES.value] = await self._link(
                ObjectType.ADOPT,
                adoption_id,
                proposal.id,
                RelationshipType.MODIFIES,
                relationship_ids,
                now,
                cancellation,
            )
        stored = StoredObject(adoption_id, adoption)

        degraded: list[str] = []
        await self._advise(ADVISOR_INDEX, lambda: self._index.record(stored), None, degraded, log)

        frequency = monitoring.frequency if monitoring else self._config.default_monitoring_frequency
        review_at = generate_review_schedule(
            now, ends, frequency, max_reviews=self._config.max_reviews
        )
        conditions = generate_revocation_conditions(adoption.effective_test, monitoring)
        archive = await self._advise(
            ADVISOR_ARCHIVE,
            lambda: self._archives.create(stored, cancellation),
            None,
            degraded,
            log,
        )

        log.info(
            "adoption_completed",
            reviews=len(review_at),
            revocation_conditions=len(conditions),
            degraded=degraded,
        )
        return AdoptionResult(
            id=adoption_id,
            timestamp=now,
            trial_period=adoption.trial_period,
            review_at=tuple(review_at),
            revocation_conditions=tuple(conditions),
            relationship_ids=relationship_ids,
            learning_archive=archive,
            degraded=tuple(degraded),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_span(self, field: str, text: str) -> Duration:
        """Parse a duration that must be a non-zero span."""
        duration = Duration.try_parse(text)
        if duration is None:
            raise InvalidDurationError(field, str(text), "not an ISO 8601 duration")
        if duration.is_zero:
            raise InvalidDurationError(field, text, "duration must be a non-zero span")
        return duration

    def _end_of_span(self, field: str, text: str, start: datetime) -> datetime:
        """Compute start + duration, enforcing the sunset ceiling.

        The ceiling compares span_days (approximate date components plus
        exact time components) against the configured limit; the end date
        itself uses calendar arithmetic.
        """
        duration = self._require_span(field, text)
        ceiling = self._config.sunset_ceiling_days
        if duration.span_days > ceiling:
            raise InvalidDurationError(field, text, f"exceeds the {ceiling}-day ceiling")
        try:
            return duration.add_to(start)
        except OverflowError:
            raise InvalidDurationError(field, text, "end date out of range") from None

    async def _call(
        self,
        cancellation: CancellationToken | None,
        stage: str,
        operation: Awaitable[T],
        object_id: str | None = None,
    ) -> T:
        if cancellation is None:
            return await operation
        return await cancellation.run(stage, operation, object_id)

    async def _resolve(
        self,
        uri: str,
        kind: ObjectType,
        record_type: type[RecordT],
        cancellation: CancellationToken | None,
    ) -> StoredObject[RecordT]:
        """Fetch and decode a referenced object.

        Raises:
            ReferenceNotFoundError: If the reference is malformed, absent,
                of another kind or unreadable.
        """
        try:
            object_id = parse_object_uri(uri, kind)
        except ValueError as exc:
            raise ReferenceNotFoundError(uri, kind.value, str(exc)) from exc

        payload = await self._call(cancellation, f"resolve_{kind.value}", self._store.get(object_id))
        if payload is None:
            raise ReferenceNotFoundError(uri, kind.value, "no object with this id")
        try:
            record = record_type.from_record(payload)  # type: ignore[attr-defined]
        except MalformedRecordError as exc:
            raise ReferenceNotFoundError(uri, kind.value, exc.reason) from exc
        return StoredObject(object_id, record)

    async def _persist(
        self, record: GovernanceObject, cancellation: CancellationToken | None
    ) -> str:
        """Store and pin a primary record.

        A pin failure on the primary record is a storage failure: the
        operation as a whole is retried by the caller.
        """
        kind = record.type.value
        object_id = await self._call(
            cancellation, f"store_{kind}", self._store.store(record.to_record())
        )
        await self._call(cancellation, f"pin_{kind}", self._store.pin(object_id), object_id)
        if self._metrics is not None:
            self._metrics.record_object_created(kind)
        return object_id

    async def _link(
        self,
        source_kind: ObjectType,
        source_id: str,
        target_id: str,
        relationship_type: RelationshipType,
        completed: dict[str, str],
        now: datetime,
        cancellation: CancellationToken | None,
    ) -> str:
        """Store and pin an edge from a stored object.

        Raises:
            PartialLinkFailureError: If the edge could not be stored or pinned.
            OperationCancelledError: If the token fires; carries source_id.
        """
        relationship = Relationship(
            timestamp=now,
            node_id=self._config.node_id,
            protocol_version=self._config.protocol_version,
            from_id=source_id,
            to_id=target_id,
            relationship_type=relationship_type,
        )
        stage = f"{relationship_type.value}_relationship"
        try:
            relationship_id = await self._call(
                cancellation,
                f"store_{stage}",
                self._store.store(relationship.to_record()),
                source_id,
            )
            await self._call(
                cancellation, f"pin_{stage}", self._store.pin(relationship_id), source_id
            )
        except StorageUnavailableError as exc:
            self._log_operation("link", object_id=source_id).error(
                "relationship_write_failed",
                relationship_type=relationship_type.value,
                error=str(exc),
            )
            raise PartialLinkFailureError(
                object_kind=source_kind.value,
                object_id=source_id,
                relationship_type=relationship_type.value,
                completed_relationships=completed,
                cause=str(exc),
            ) from exc

        if self._metrics is not None:
            self._metrics.record_relationship_created(relationship_type.value)
        return relationship_id

    async def _advise(
        self,
        name: str,
        call: Callable[[], Awaitable[T]],
        fallback: T,
        degraded: list[str],
        log: structlog.BoundLogger,
    ) -> T:
        """Run a best-effort step under the advisor time bound.

        Best-effort steps run after the primary record is stored, so any
        failure, including a fired cancellation token, yields the fallback
        and names the step in degraded.
        """
        try:
            return await asyncio.wait_for(call(), timeout=self._config.advisor_timeout_seconds)
        except OperationCancelledError as exc:
            log.warning(
                "advisor_degraded", advisor=name, reason=exc.reason, stage=exc.stage
            )
        except asyncio.TimeoutError:
            log.warning(
                "advisor_degraded",
                advisor=name,
                reason="timeout",
                timeout_seconds=self._config.advisor_timeout_seconds,
            )
        except Exception as exc:
            log.warning("advisor_degraded", advisor=name, reason=type(exc).__name__, error=str(exc))

        if self._metrics is not None:
            self._metrics.record_advisor_degraded(name)
        degraded.append(name)
        return fallback

    def _record_failure(self, operation: str, error: GovernanceError) -> None:
        self._log_operation(operation).warning(
            "operation_failed", error_type=type(error).__name__, error=str(error)
        )
        if self._metrics is not None:
            self._metrics.record_operation_failure(operation, type(error).__name__)
