"""
Tracker Ingestor - Batch Semantics Tests

Covers:
  - events apply in array order (CHECKIN then MOVE ends at the MOVE target)
  - rejection isolation: a bad kind does not stop its siblings
  - whole-batch structural failure mutates nothing
  - response self-consistency: counts add up, nextSeqExpected only with seqStart
  - contract breach when the assembled response is invalid
"""

import pytest

from tracker.kernel.events import make_batch, make_event
from tracker.kernel.ingestor import BatchIngestor, BatchRejected, ContractBreach

# ============================================================================
# Ordering
# ============================================================================


class TestOrdering:
    def test_move_observes_checkin(self, ingestor, reader):
        ingestor.ingest(make_batch([
            make_event(1, "CHECKIN", {"objectType": "ITEM", "objectId": "A", "zoneId": "Z1"}),
            make_event(2, "MOVE", {"objectType": "ITEM", "objectId": "A", "toZoneId": "Z2"}),
        ]))
        assert reader.placement_for_object("ITEM", "A")["zoneId"] == "Z2"

    def test_reverse_order_ends_at_checkin(self, ingestor, reader):
        ingestor.ingest(make_batch([
            make_event(1, "MOVE", {"objectType": "ITEM", "objectId": "A", "toZoneId": "Z2"}),
            make_event(2, "CHECKIN", {"objectType": "ITEM", "objectId": "A", "zoneId": "Z1"}),
        ]))
        assert reader.placement_for_object("ITEM", "A")["zoneId"] == "Z1"

    def test_zone_to_container_switch(self, ingestor, reader):
        ingestor.ingest(make_batch([
            make_event(1, "CHECKIN", {"objectType": "ITEM", "objectId": "A", "zoneId": "Z1"}),
            make_event(2, "MOVE", {"objectType": "ITEM", "objectId": "A", "toCtbPath": ["ctb-1", "ctb-2"]}),
        ]))
        placement = reader.placement_for_object("ITEM", "A")
        assert placement["ctbPath"] == ["ctb-1", "ctb-2"]
        assert "zoneId" not in placement


# ============================================================================
# Rejection isolation
# ============================================================================


class TestRejectionIsolation:
    def test_bogus_kind_does_not_abort_batch(self, ingestor, reader):
        out = ingestor.ingest(make_batch([
            make_event(1, "BIND", {"tagUid": "T", "objectType": "ITEM", "objectId": "A"}),
            make_event(2, "FOO", {"x": 1}),
        ]))
        results = out.response["results"]
        assert results[0]["status"] == "ACCEPTED"
        assert results[1]["status"] == "REJECTED"
        assert results[1]["code"] == "SCHEMA_INVALID"
        assert results[1]["message"] == "Unknown kind: FOO"
        assert out.response["rejected"] == 1
        assert reader.binding_for_tag("T")["objectId"] == "A"

    def test_events_after_rejection_still_apply(self, ingestor, reader):
        ingestor.ingest(make_batch([
            make_event(1, "FOO", {}),
            make_event(2, "BIND", {"tagUid": "T", "zoneId": "Z"}),
        ]))
        assert reader.binding_for_tag("T") is not None


class TestStructuralFailure:
    def test_invalid_batch_mutates_nothing(self, ingestor, store):
        batch = make_batch([
            make_event(1, "BIND", {"tagUid": "t1", "zoneId": "z1"}),
            make_event(2, "CHECKIN", {"objectType": "ITEM", "objectId": "i1"}),  # no location
        ])
        with pytest.raises(BatchRejected) as exc_info:
            ingestor.ingest(batch)

        assert exc_info.value.issues
        assert store.get_binding("t1") is None
        assert not store.has_seen("key_0001")

    def test_non_dict_envelope(self, ingestor):
        with pytest.raises(BatchRejected):
            ingestor.ingest(["not", "an", "envelope"])


# ============================================================================
# Response assembly
# ============================================================================


class TestResponse:
    def test_counts_add_up(self, ingestor):
        ingestor.ingest(make_batch([make_event(1, "UNBIND", {"tagUid": "t0"}, event_key="old")]))
        events = [
            make_event(2, "UNBIND", {"tagUid": "t0"}, event_key="old"),
            make_event(3, "FOO", {}),
            make_event(4, "BIND", {"tagUid": "t1", "zoneId": "z1"}),
            make_event(5, "BIND", {"tagUid": "t1", "zoneId": "z1"}, event_key="key_0004"),
        ]
        out = ingestor.ingest(make_batch(events))
        resp = out.response
        accepted = sum(1 for r in resp["results"] if r["status"] == "ACCEPTED")
        assert resp["rejected"] + resp["duplicate"] + accepted == len(events)
        assert (out.summary.accepted, out.summary.rejected, out.summary.duplicate) == (1, 1, 2)

    def test_next_seq_expected(self, ingestor):
        out = ingestor.ingest(make_batch(
            [make_event(i, "UNBIND", {"tagUid": "t"}) for i in range(3)],
            seq_start=40,
        ))
        assert out.response["nextSeqExpected"] == 43

    def test_next_seq_with_zero_start(self, ingestor):
        out = ingestor.ingest(make_batch([make_event(1, "UNBIND", {"tagUid": "t"})], seq_start=0))
        assert out.response["nextSeqExpected"] == 1

    def test_next_seq_with_integral_float_start(self, ingestor):
        batch = make_batch([make_event(i, "UNBIND", {"tagUid": "t"}) for i in range(2)], seq_start=2.0)
        out = ingestor.ingest(batch)
        assert out.response["nextSeqExpected"] == 4
        assert isinstance(out.response["nextSeqExpected"], int)

    def test_no_seq_start_no_next_seq(self, ingestor):
        out = ingestor.ingest(make_batch([make_event(1, "UNBIND", {"tagUid": "t"})]))
        assert "nextSeqExpected" not in out.response

    def test_result_shape(self, ingestor):
        out = ingestor.ingest(make_batch([
            make_event(1, "UNBIND", {"tagUid": "t"}, event_id="e-1", event_key="k-1"),
        ]))
        assert out.response["serverTime"] == "2026-03-01T12:00:00.000Z"
        assert out.response["results"] == [
            {"eventId": "e-1", "eventKey": "k-1", "status": "ACCEPTED", "eventIndex": 0},
        ]


class TestContractBreach:
    def test_invalid_server_time_is_a_breach(self, store, gate):
        broken = BatchIngestor(store, gate, clock=lambda: "not a timestamp")
        with pytest.raises(ContractBreach) as exc_info:
            broken.ingest(make_batch([
                make_event(1, "UNBIND", {"tagUid": "t"}, produced_at="2026-03-01T08:00:00Z"),
            ]))
        assert any(i.instance_path == "/serverTime" for i in exc_info.value.issues)
        assert exc_info.value.response["results"][0]["status"] == "ACCEPTED"
