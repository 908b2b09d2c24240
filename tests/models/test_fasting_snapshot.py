"""Tests for snapshot encoding, decoding and schema migration."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from fasttrack_cli.models.fasting.history import HistoryEntry
from fasttrack_cli.models.fasting.session import DEFAULT_PLANNED_HOURS, FastingSession
from fasttrack_cli.models.fasting.snapshot import (
    SCHEMA_VERSION,
    Snapshot,
    decode_snapshot,
    encode_snapshot,
    migrate_snapshot,
)

T0 = datetime(2026, 6, 1, 20, 0).astimezone()


def _history(n: int) -> list[HistoryEntry]:
    entries = []
    for i in range(n):
        start = T0 + timedelta(days=i)
        entries.append(HistoryEntry.from_span(start, start + timedelta(hours=16 + i), 16))
    return entries


def _session() -> FastingSession:
    return FastingSession(
        start_time=T0.isoformat(),
        end_time=(T0 + timedelta(hours=18)).isoformat(),
        planned_hours=18,
        notification_handle="alert-1",
    )


class TestEncodeDecode:
    def test_on_disk_field_names(self):
        blob = encode_snapshot(Snapshot.capture(_session(), _history(1), 18))
        data = json.loads(blob)
        assert data["schemaVersion"] == SCHEMA_VERSION
        assert data["isFasting"] is True
        assert data["plannedHours"] == 18
        assert data["notificationHandle"] == "alert-1"
        assert set(data["history"][0]) == {
            "start",
            "end",
            "plannedHours",
            "actualHours",
            "completedAt",
        }

    def test_round_trip_preserves_session_and_history_order(self):
        history = list(reversed(_history(3)))
        snapshot = decode_snapshot(encode_snapshot(Snapshot.capture(_session(), history, 18)))
        assert snapshot.to_session() == _session()
        assert snapshot.to_history() == history

    def test_idle_round_trip_keeps_planned_hours(self):
        snapshot = decode_snapshot(encode_snapshot(Snapshot.capture(None, [], 20)))
        assert snapshot.to_session() is None
        assert snapshot.planned_hours == 20

    @pytest.mark.parametrize("planned", [0, -1])
    def test_non_positive_hours_encode_and_repair_on_decode(self, planned):
        blob = encode_snapshot(Snapshot.capture(None, [], planned))
        assert json.loads(blob)["plannedHours"] == planned
        assert decode_snapshot(blob).planned_hours == DEFAULT_PLANNED_HOURS

    @pytest.mark.parametrize("blob", [None, "", "not json", "[1, 2]", "42", '"text"'])
    def test_unreadable_blob_is_absent(self, blob):
        assert decode_snapshot(blob) is None

    def test_invalid_timestamp_in_session_is_absent(self):
        blob = json.dumps({"isFasting": True, "startTime": "yesterday", "endTime": "today"})
        assert decode_snapshot(blob) is None


class TestMigration:
    def test_rejects_non_object(self):
        with pytest.raises(TypeError):
            migrate_snapshot(["isFasting"])

    def test_v1_fields_renamed(self):
        raw = {
            "isFasting": True,
            "startTime": T0.isoformat(),
            "endTime": (T0 + timedelta(hours=16)).isoformat(),
            "durationHours": 16,
            "notifId": "legacy-id",
        }
        snapshot = decode_snapshot(json.dumps(raw))
        session = snapshot.to_session()
        assert session.planned_hours == 16
        assert session.notification_handle == "legacy-id"
        assert snapshot.history == []

    def test_missing_fields_get_defaults(self):
        snapshot = decode_snapshot("{}")
        assert snapshot.is_fasting is False
        assert snapshot.planned_hours == DEFAULT_PLANNED_HOURS
        assert snapshot.history == []

    @pytest.mark.parametrize("planned", [0, -4, "16", True, None])
    def test_bad_planned_hours_defaulted(self, planned):
        data = migrate_snapshot({"plannedHours": planned})
        assert data["plannedHours"] == DEFAULT_PLANNED_HOURS

    def test_fasting_without_timestamps_becomes_idle(self):
        data = migrate_snapshot(
            {"isFasting": True, "startTime": T0.isoformat(), "notificationHandle": "x"}
        )
        assert data["isFasting"] is False
        assert data["startTime"] is None
        assert data["notificationHandle"] is None

    def test_idle_with_stray_timestamps_cleared(self):
        data = migrate_snapshot(
            {"isFasting": False, "startTime": T0.isoformat(), "endTime": T0.isoformat()}
        )
        assert data["startTime"] is None
        assert data["endTime"] is None

    def test_malformed_history_rows_dropped(self):
        good = {
            "start": T0.isoformat(),
            "end": (T0 + timedelta(hours=16)).isoformat(),
            "plannedHours": 16,
            "actualHours": 16,
        }
        raw = {"history": [good, {"start": "nope"}, "junk", {**good, "actualHours": -2}]}
        snapshot = decode_snapshot(json.dumps(raw))
        assert len(snapshot.history) == 1

    def test_history_not_a_list_becomes_empty(self):
        assert migrate_snapshot({"history": {"a": 1}})["history"] == []

    def test_missing_completed_at_falls_back_to_end(self):
        end = (T0 + timedelta(hours=16)).isoformat()
        raw = {"history": [{"start": T0.isoformat(), "end": end, "actualHours": 16}]}
        entries = decode_snapshot(json.dumps(raw)).to_history()
        assert entries[0].completed_at == end
        assert entries[0].planned_hours == DEFAULT_PLANNED_HOURS

    def test_unknown_fields_ignored(self):
        snapshot = decode_snapshot(json.dumps({"theme": "dark", "plannedHours": 14}))
        assert snapshot.planned_hours == 14
