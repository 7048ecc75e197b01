"""Tests for the approval workflow."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from evidence_engine.errors import InvalidStateError, StorageError, ValidationError
from evidence_engine.models import EvidenceApprovalRecord
from evidence_engine.schemas.search import ActorScope
from evidence_engine.services.approvals import (
    approval_history,
    list_pending_approvals,
    process_approval,
    request_approval,
)
from tests.test_constants import TEST_OTHER_MANAGER_ID


class TestRequestApproval:
    """none/rejected -> pending."""

    def test_request_moves_to_pending(self, db: Session, make_entry) -> None:
        """A fresh entry can be submitted for approval."""
        entry = make_entry()
        assert request_approval(db, entry.id).approval_status == "pending"

    def test_request_twice_is_invalid(self, db: Session, make_entry) -> None:
        """An entry already pending cannot be re-submitted."""
        entry = make_entry()
        request_approval(db, entry.id)
        with pytest.raises(InvalidStateError):
            request_approval(db, entry.id)

    def test_rejected_can_be_resubmitted(self, db: Session, make_entry) -> None:
        """Rejected entries may go back to pending."""
        entry = make_entry(approval_status="rejected")
        assert request_approval(db, entry.id).approval_status == "pending"

    def test_archived_cannot_be_submitted(self, db: Session, make_entry) -> None:
        """Archived entries are outside the approval flow."""
        entry = make_entry(archived=True)
        with pytest.raises(InvalidStateError):
            request_approval(db, entry.id)


class TestProcessApproval:
    """pending -> approved | rejected."""

    @pytest.mark.parametrize("decision", ["approved", "rejected"])
    def test_decide_pending(self, db: Session, make_entry, decision: str) -> None:
        """A pending entry takes the decision."""
        entry = make_entry(approval_status="pending")
        assert process_approval(db, entry.id, decision, approver_id=7).approval_status == decision

    def test_decision_must_be_final_state(self, db: Session, make_entry) -> None:
        """Only approved or rejected are valid decisions."""
        entry = make_entry(approval_status="pending")
        with pytest.raises(ValidationError):
            process_approval(db, entry.id, "pending")
        with pytest.raises(ValidationError):
            process_approval(db, entry.id, "maybe")

    def test_not_pending_is_invalid(self, db: Session, make_entry) -> None:
        """Deciding an entry that is not pending raises InvalidStateError."""
        entry = make_entry(approval_status="approved")
        with pytest.raises(InvalidStateError):
            process_approval(db, entry.id, "rejected")

    def test_decision_is_recorded_with_comments(self, db: Session, make_entry) -> None:
        """Approver, outcome and trimmed comments are stored with the decision."""
        entry = make_entry(approval_status="pending")
        process_approval(db, entry.id, "rejected", approver_id=7, comments="  Needs a date range  ")

        [record] = approval_history(db, entry.id)
        assert record.approver_id == 7
        assert record.status == "rejected"
        assert record.comments == "Needs a date range"
        assert record.approved_at is not None

    def test_each_decision_adds_a_record(self, db: Session, make_entry) -> None:
        """Reject, resubmit, approve leaves two records, oldest first."""
        entry = make_entry(approval_status="pending")
        process_approval(db, entry.id, "rejected", approver_id=7)
        request_approval(db, entry.id)
        process_approval(db, entry.id, "approved", approver_id=8)

        history = approval_history(db, entry.id)
        assert [(r.status, r.approver_id, r.comments) for r in history] == [
            ("rejected", 7, None),
            ("approved", 8, None),
        ]

    def test_failed_decision_writes_no_record(self, db: Session, make_entry) -> None:
        """A decision on a non-pending entry leaves no approval record."""
        entry = make_entry(approval_status="approved")
        with pytest.raises(InvalidStateError):
            process_approval(db, entry.id, "rejected", approver_id=7, comments="late")
        assert db.query(EvidenceApprovalRecord).count() == 0


class TestPendingQueue:
    """list_pending_approvals."""

    def test_lists_only_active_pending(self, db: Session, make_entry) -> None:
        """Archived and non-pending entries are excluded."""
        pending = make_entry(approval_status="pending")
        make_entry(approval_status="approved")
        make_entry(approval_status="pending", archived=True)

        assert [e.id for e in list_pending_approvals(db)] == [pending.id]

    def test_scope_applies(self, db: Session, make_entry) -> None:
        """The queue respects the caller's manager scope."""
        make_entry(approval_status="pending")
        other = make_entry(approval_status="pending", manager_id=TEST_OTHER_MANAGER_ID)

        queue = list_pending_approvals(db, ActorScope(manager_id=TEST_OTHER_MANAGER_ID))
        assert [e.id for e in queue] == [other.id]

    def test_database_error_raises_storage_error(self, db: Session) -> None:
        """A database fault while reading the queue surfaces as StorageError."""
        with patch.object(
            db, "query", side_effect=OperationalError("SELECT", {}, Exception("down"))
        ):
            with pytest.raises(StorageError):
                list_pending_approvals(db)
