"""Unit tests for governance records: wire shape, decoding and status."""

from datetime import datetime, timedelta, timezone

import pytest

from egp.domain.errors import InvalidStatusTransitionError, MalformedRecordError
from egp.domain.models import (
    Adoption,
    AdoptionStatus,
    DecisionProcess,
    LearningArchive,
    ObjectType,
    Proposal,
    ProposalContext,
    ProposalStatus,
    Relationship,
    RelationshipType,
    Sense,
    SenseContext,
    Solution,
    TrialPeriod,
    object_uri,
    parse_object_uri,
)
from egp.domain.models.adoption import DecisionProcessType, Modifications
from egp.domain.models.instant import format_instant, parse_instant

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_sense(**overrides: object) -> Sense:
    fields = {
        "timestamp": NOW,
        "issue": "water_shortage",
        "scope": "village:llajta",
        "urgency": "3/5",
        "tags": ("water",),
    }
    fields.update(overrides)
    return Sense(**fields)  # type: ignore[arg-type]


def make_proposal(**overrides: object) -> Proposal:
    fields = {
        "timestamp": NOW,
        "title": "Moonlight Water Sharing",
        "in_response_to": "/sense/bsense",
        "solution": Solution(description="Farmers take turns at night"),
        "test": "Conflict drops 20% in 2mo",
        "sunset": "P6M",
        "sunset_date": NOW + timedelta(days=180),
        "sense_context": SenseContext(id="bsense", issue="water_shortage", scope="village:llajta"),
    }
    fields.update(overrides)
    return Proposal(**fields)  # type: ignore[arg-type]


def make_adoption(**overrides: object) -> Adoption:
    fields = {
        "timestamp": NOW,
        "proposal_uri": "/propose/bprop",
        "decision_process": DecisionProcess(type=DecisionProcessType.CONSENT),
        "trial_period": TrialPeriod(
            starts=NOW, ends=NOW + timedelta(days=90), original_sunset=NOW + timedelta(days=180)
        ),
        "proposal_context": ProposalContext(
            id="bprop", title="Moonlight", sense_id="bsense", original_test="Conflict drops 20%"
        ),
    }
    fields.update(overrides)
    return Adoption(**fields)  # type: ignore[arg-type]


class TestInstants:
    """Tests for the wire format of instants."""

    def test_format_uses_z_and_milliseconds(self) -> None:
        assert format_instant(NOW) == "2026-03-01T12:00:00.000Z"

    def test_parse_round_trip(self) -> None:
        assert parse_instant(format_instant(NOW)) == NOW


class TestObjectUri:
    """Tests for /{kind}/{id} references."""

    def test_build_and_parse(self) -> None:
        uri = object_uri(ObjectType.SENSE, "babc123")
        assert uri == "/sense/babc123"
        assert parse_object_uri(uri, ObjectType.SENSE) == "babc123"

    @pytest.mark.parametrize("uri", ["/propose/babc", "/sense/", "/sense/a-b", "sense/abc"])
    def test_rejects_other_shapes(self, uri: str) -> None:
        with pytest.raises(ValueError):
            parse_object_uri(uri, ObjectType.SENSE)


class TestSense:
    """Tests for Sense records."""

    def test_envelope_fields(self) -> None:
        """Test every record carries type, protocol_version, timestamp, node_id."""
        record = make_sense(node_id="node-1").to_record()
        assert record["type"] == "sense"
        assert record["protocol_version"] == "0.1.0-alpha"
        assert record["timestamp"] == "2026-03-01T12:00:00.000Z"
        assert record["node_id"] == "node-1"

    def test_optional_fields_omitted(self) -> None:
        record = make_sense().to_record()
        assert "title" not in record
        assert "expires_at" not in record

    def test_from_record_round_trip(self) -> None:
        sense = make_sense(expires_at=NOW + timedelta(days=7), evidence={"ph": "9.2"})
        assert Sense.from_record(sense.to_record()) == sense

    def test_from_record_rejects_other_type(self) -> None:
        record = make_proposal().to_record()
        with pytest.raises(MalformedRecordError):
            Sense.from_record(record)

    def test_from_record_rejects_missing_field(self) -> None:
        record = make_sense().to_record()
        del record["issue"]
        with pytest.raises(MalformedRecordError):
            Sense.from_record(record)

    def test_from_record_rejects_non_mapping(self) -> None:
        with pytest.raises(MalformedRecordError):
            Sense.from_record("not a record")

    def test_expiry(self) -> None:
        sense = make_sense(expires_at=NOW + timedelta(days=1))
        assert not sense.is_expired(NOW)
        assert sense.is_expired(NOW + timedelta(days=2))
        assert not make_sense().is_expired(NOW + timedelta(days=3650))

    def test_scope_prefix_and_urgency_level(self) -> None:
        sense = make_sense()
        assert sense.scope_prefix == "village"
        assert sense.urgency_level == 3

    def test_evidence_is_detached_copy(self) -> None:
        evidence = {"ph": "9.2"}
        sense = make_sense(evidence=evidence)
        evidence["ph"] = "7.0"
        assert sense.evidence == {"ph": "9.2"}


class TestProposal:
    """Tests for Proposal records and status."""

    def test_record_carries_sense_context_and_sunset_date(self) -> None:
        record = make_proposal().to_record()
        assert record["type"] == "propose"
        assert record["sense_context"] == {
            "id": "bsense",
            "issue": "water_shortage",
            "scope": "village:llajta",
        }
        assert record["sunset_date"] == format_instant(NOW + timedelta(days=180))
        assert record["status"] == "proposed"

    def test_from_record_round_trip(self) -> None:
        proposal = make_proposal()
        assert Proposal.from_record(proposal.to_record()) == proposal

    def test_effective_status_expires_after_sunset(self) -> None:
        proposal = make_proposal()
        assert proposal.effective_status(NOW) == ProposalStatus.PROPOSED
        assert proposal.effective_status(NOW + timedelta(days=181)) == ProposalStatus.EXPIRED

    def test_effective_status_adopted(self) -> None:
        assert make_proposal().effective_status(NOW, adopted=True) == ProposalStatus.ADOPTED

    def test_sunset_boundary_is_not_expired(self) -> None:
        """Test the proposal is still actionable at exactly its sunset date."""
        proposal = make_proposal()
        assert not proposal.is_expired(proposal.sunset_date)

    def test_valid_transition(self) -> None:
        adopted = make_proposal().with_status(ProposalStatus.ADOPTED)
        assert adopted.status == ProposalStatus.ADOPTED

    def test_invalid_transition_raises(self) -> None:
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            make_proposal().with_status(ProposalStatus.COMPLETED)
        assert exc_info.value.allowed == ["adopted", "expired"]

    def test_terminal_states_have_no_transitions(self) -> None:
        assert ProposalStatus.EXPIRED.is_terminal()
        assert ProposalStatus.EXPIRED.valid_transitions() == frozenset()


class TestAdoption:
    """Tests for Adoption records and status."""

    def test_effective_test_prefers_modification(self) -> None:
        adoption = make_adoption(modifications=Modifications(test="Conflict drops 10%"))
        assert adoption.effective_test == "Conflict drops 10%"
        assert make_adoption().effective_test == "Conflict drops 20%"

    def test_effective_status_expires_after_trial(self) -> None:
        adoption = make_adoption()
        assert adoption.effective_status(NOW) == AdoptionStatus.ACTIVE
        assert adoption.effective_status(NOW + timedelta(days=91)) == AdoptionStatus.EXPIRED

    def test_revoked_stays_revoked(self) -> None:
        revoked = make_adoption().with_status(AdoptionStatus.REVOKED)
        assert revoked.effective_status(NOW + timedelta(days=400)) == AdoptionStatus.REVOKED

    def test_monitoring_cannot_return_to_active(self) -> None:
        monitoring = make_adoption().with_status(AdoptionStatus.MONITORING)
        with pytest.raises(InvalidStatusTransitionError):
            monitoring.with_status(AdoptionStatus.ACTIVE)

    def test_from_record_round_trip(self) -> None:
        adoption = make_adoption()
        assert Adoption.from_record(adoption.to_record()) == adoption


class TestRelationship:
    """Tests for relationship edges."""

    def test_record_uses_links(self) -> None:
        edge = Relationship(
            timestamp=NOW, from_id="bprop", to_id="bsense",
            relationship_type=RelationshipType.RESPONDS_TO,
        )
        record = edge.to_record()
        assert record["type"] == "relationship"
        assert record["from"] == {"/": "bprop"}
        assert record["to"] == {"/": "bsense"}
        assert record["relationshipType"] == "responds_to"
        assert Relationship.from_record(record) == edge

    def test_from_record_rejects_bare_ids(self) -> None:
        record = Relationship(
            timestamp=NOW, from_id="a1", to_id="b2", relationship_type=RelationshipType.ADOPTS
        ).to_record()
        record["from"] = "a1"
        with pytest.raises(MalformedRecordError):
            Relationship.from_record(record)


class TestLearningArchive:
    """Tests for the learning archive skeleton."""

    def test_record_shape(self) -> None:
        archive = LearningArchive(
            timestamp=NOW,
            adoption_id="badopt",
            proposal_id="bprop",
            sense_id="bsense",
            contributors=("water_council",),
        )
        record = archive.to_record()
        assert record["type"] == "learning_archive"
        assert record["structure"]["final_report"] == "/final_report.md"
        assert record["access_control"] == {
            "public_read": True,
            "contribute_roles": ["water_council"],
            "admin_roles": ["community_council"],
        }
