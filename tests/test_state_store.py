"""Tests for lifecycle/store.py."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from clustermgmt.domain.models import ResourceIdentity, ResourceStatus
from clustermgmt.lifecycle.store import AdmissionOutcome, CompletionOutcome, ResourceStateStore

INGRESS = ResourceIdentity("prod", "web", "ingress")


@pytest.fixture
def store() -> ResourceStateStore:
    return ResourceStateStore()


class TestTryBeginCreate:
    def test_accepts_when_absent(self, store):
        result = store.try_begin_create(INGRESS, {"replicas": 2}, "nginx")

        assert result.accepted
        assert result.entry.status is ResourceStatus.creating
        assert result.entry.kind == "nginx"
        assert result.entry.operation_id
        assert store.get_or_absent(INGRESS) == result.entry

    def test_copies_spec(self, store):
        spec = {"ports": [80]}
        store.try_begin_create(INGRESS, spec, "nginx")
        spec["ports"].append(443)

        assert store.get_or_absent(INGRESS).spec == {"ports": [80]}

    @pytest.mark.parametrize("status", [ResourceStatus.creating, ResourceStatus.deleting])
    def test_in_progress_conflict(self, store, status):
        store.try_begin_create(INGRESS, {}, "nginx")
        if status is ResourceStatus.deleting:
            store.complete(INGRESS, CompletionOutcome.activated())
            store.try_begin_delete(INGRESS)
        before = store.get_or_absent(INGRESS)

        result = store.try_begin_create(INGRESS, {}, "nginx")

        assert result.outcome is AdmissionOutcome.in_progress
        assert store.get_or_absent(INGRESS) == before

    def test_already_exists_when_active(self, store):
        store.try_begin_create(INGRESS, {}, "nginx")
        store.complete(INGRESS, CompletionOutcome.activated())

        result = store.try_begin_create(INGRESS, {}, "nginx")

        assert result.outcome is AdmissionOutcome.already_exists
        assert store.get_or_absent(INGRESS).status is ResourceStatus.active

    def test_failed_entry_restarts_fresh(self, store):
        first = store.try_begin_create(INGRESS, {"v": 1}, "nginx").entry
        store.complete(INGRESS, CompletionOutcome.failed("boom"))

        result = store.try_begin_create(INGRESS, {"v": 2}, "nginx")

        assert result.accepted
        assert result.entry.status is ResourceStatus.creating
        assert result.entry.last_error is None
        assert result.entry.spec == {"v": 2}
        assert result.entry.operation_id != first.operation_id

    def test_concurrent_threads_admit_exactly_one(self, store):
        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(
                pool.map(lambda _: store.try_begin_create(INGRESS, {}, "nginx"), range(64))
            )

        accepted = [r for r in results if r.accepted]
        assert len(accepted) == 1
        assert all(r.outcome is AdmissionOutcome.in_progress for r in results if not r.accepted)
        assert len(store) == 1


class TestTryBeginDelete:
    def test_not_found_when_absent(self, store):
        result = store.try_begin_delete(INGRESS)

        assert result.outcome is AdmissionOutcome.not_found
        assert result.entry is None

    def test_active_moves_to_deleting(self, store):
        created = store.try_begin_create(INGRESS, {}, "nginx").entry
        store.complete(INGRESS, CompletionOutcome.activated())

        result = store.try_begin_delete(INGRESS)

        assert result.accepted
        assert result.entry.status is ResourceStatus.deleting
        assert result.entry.created_at == created.created_at
        assert result.entry.operation_id != created.operation_id

    def test_failed_moves_to_deleting(self, store):
        store.try_begin_create(INGRESS, {}, "nginx")
        store.complete(INGRESS, CompletionOutcome.failed("boom"))

        result = store.try_begin_delete(INGRESS)

        assert result.accepted
        assert result.entry.status is ResourceStatus.deleting
        assert result.entry.last_error is None

    def test_in_progress_while_creating(self, store):
        store.try_begin_create(INGRESS, {}, "nginx")

        result = store.try_begin_delete(INGRESS)

        assert result.outcome is AdmissionOutcome.in_progress
        assert store.get_or_absent(INGRESS).status is ResourceStatus.creating


class TestComplete:
    def test_deleted_removes_entry(self, store):
        store.try_begin_create(INGRESS, {}, "nginx")
        store.complete(INGRESS, CompletionOutcome.activated())
        store.try_begin_delete(INGRESS)

        assert store.complete(INGRESS, CompletionOutcome.deleted())
        assert store.get_or_absent(INGRESS) is None

    def test_failed_records_error(self, store):
        store.try_begin_create(INGRESS, {}, "nginx")

        assert store.complete(INGRESS, CompletionOutcome.failed("image pull failed"))

        entry = store.get_or_absent(INGRESS)
        assert entry.status is ResourceStatus.failed
        assert entry.last_error == "image pull failed"
        assert entry.updated_at >= entry.created_at

    def test_failed_removal_retains_entry(self, store):
        store.try_begin_create(INGRESS, {}, "nginx")
        store.complete(INGRESS, CompletionOutcome.activated())
        store.try_begin_delete(INGRESS)

        assert store.complete(INGRESS, CompletionOutcome.failed("finalizer stuck"))
        assert store.get_or_absent(INGRESS).status is ResourceStatus.failed

    def test_ignores_missing_entry(self, store):
        assert not store.complete(INGRESS, CompletionOutcome.activated())

    def test_ignores_stale_operation(self, store):
        first = store.try_begin_create(INGRESS, {}, "nginx").entry
        store.complete(INGRESS, CompletionOutcome.failed("boom"), operation_id=first.operation_id)
        second = store.try_begin_create(INGRESS, {}, "nginx").entry

        assert not store.complete(
            INGRESS, CompletionOutcome.activated(), operation_id=first.operation_id
        )
        assert store.get_or_absent(INGRESS) == second

    def test_ignores_outcome_for_wrong_state(self, store):
        store.try_begin_create(INGRESS, {}, "nginx")

        assert not store.complete(INGRESS, CompletionOutcome.deleted())
        assert store.get_or_absent(INGRESS).status is ResourceStatus.creating


class TestReads:
    def test_list_by_cluster_filters_and_keeps_insertion_order(self, store):
        for name in ("ingress", "dns", "cert-manager"):
            store.try_begin_create(ResourceIdentity("prod", "web", name), {}, "nginx")
        store.try_begin_create(ResourceIdentity("prod", "api", "ingress"), {}, "nginx")
        store.try_begin_create(ResourceIdentity("staging", "web", "ingress"), {}, "nginx")

        names = [entry.name for entry in store.list_by_cluster("prod", "web")]

        assert names == ["ingress", "dns", "cert-manager"]

    def test_list_by_cluster_empty(self, store):
        assert store.list_by_cluster("prod", "web") == []

    def test_returned_entries_are_snapshots(self, store):
        creating = store.try_begin_create(INGRESS, {}, "nginx").entry
        store.complete(INGRESS, CompletionOutcome.activated())

        assert creating.status is ResourceStatus.creating
        assert store.get_or_absent(INGRESS).status is ResourceStatus.active

    def test_mutating_returned_spec_leaves_state_alone(self, store):
        accepted = store.try_begin_create(INGRESS, {"ports": [80]}, "nginx").entry
        accepted.spec["ports"].append(443)
        store.get_or_absent(INGRESS).spec["replicas"] = 9
        store.list_by_cluster("prod", "web")[0].spec.clear()

        assert store.get_or_absent(INGRESS).spec == {"ports": [80]}
