import dataclasses

import pytest

from tfcsync.cloud import CloudClient
from tfcsync.workspace import (
    EVENT_WARNING,
    Event,
    EventRecorder,
    TeamAccessSpec,
    TeamRef,
    WorkspaceInstance,
    WorkspaceSpec,
)


def test_recorder_keeps_events_in_order():
    recorder = EventRecorder()
    first = recorder.event(EVENT_WARNING, "ReconcileTeamAccess", "Failed to get team ID")
    recorder.event(EVENT_WARNING, "ReconcileVariables", "Failed to get value for a variable")
    assert first == Event(EVENT_WARNING, "ReconcileTeamAccess", "Failed to get team ID")
    assert [e.reason for e in recorder.events] == ["ReconcileTeamAccess", "ReconcileVariables"]


def test_events_are_immutable():
    recorder = EventRecorder()
    event = recorder.event(EVENT_WARNING, "r", "m")
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.reason = "other"
    assert event.reason == "r"
    assert recorder.events == [Event(EVENT_WARNING, "r", "m")]


def test_spec_defaults_are_independent():
    first = WorkspaceSpec(organization="acme")
    second = WorkspaceSpec(organization="acme")
    first.tags.append("x")
    assert second.tags == []
    assert second.team_access is None


def test_instances_have_their_own_recorder():
    client = CloudClient()
    one = WorkspaceInstance(name="a", spec=WorkspaceSpec(organization="acme"), client=client)
    two = WorkspaceInstance(name="b", spec=WorkspaceSpec(organization="acme"), client=client)
    one.recorder.event(EVENT_WARNING, "r", "m")
    assert two.recorder.events == []
    assert len(one.recorder.events) == 1


def test_team_access_specs_have_separate_custom_permissions():
    a = TeamAccessSpec(team=TeamRef(name="devs"))
    b = TeamAccessSpec(team=TeamRef(name="ops"))
    a.custom.run_tasks = True
    assert b.custom.run_tasks is False