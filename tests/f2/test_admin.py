"""Tests for user administration (F2)."""

import pytest

from quizdesk.core import accounts, admin
from quizdesk.core.errors import NotFoundError, PermissionDeniedError, ValidationError


class TestApprovalQueue:
    """list_users, approve_user, revoke_access, reject_user."""

    def test_list_users_splits_pending_and_verified(self, make_user):
        pending = make_user("student", verified=False, name="Pat Pending")
        verified = make_user("instructor", name="Vic Verified")

        pending_list, verified_list = admin.list_users()

        assert [u.id for u in pending_list] == [pending.id]
        assert [u.id for u in verified_list] == [verified.id]
        assert pending_list[0].role == "student"
        assert verified_list[0].to_dict()["full_name"] == "Vic Verified"

    def test_newest_first(self, make_user):
        first = make_user("student", verified=False)
        second = make_user("student", verified=False)
        pending, _ = admin.list_users()
        assert [u.id for u in pending] == [second.id, first.id]

    def test_approve_and_revoke(self, make_user):
        user = make_user("student", verified=False)

        admin.approve_user(user.id)
        assert accounts.get_user(user.id).verified is True

        admin.revoke_access(user.id)
        assert accounts.get_user(user.id).verified is False

    def test_reject_deletes_profile(self, make_user):
        user = make_user("student", verified=False)
        admin.reject_user(user.id)
        with pytest.raises(NotFoundError):
            accounts.get_user(user.id)

    @pytest.mark.parametrize("action", [admin.approve_user, admin.revoke_access, admin.reject_user])
    def test_unknown_user(self, db, action):
        with pytest.raises(NotFoundError):
            action("missing-id")


class TestDeleteUser:
    """Tests for admin.delete_user."""

    def test_requires_admin(self, instructor, student):
        with pytest.raises(PermissionDeniedError) as exc_info:
            admin.delete_user(instructor, student.id)
        assert exc_info.value.message == "Admin access required"

    @pytest.mark.parametrize("user_id", [None, ""])
    def test_requires_user_id(self, admin_user, user_id):
        with pytest.raises(ValidationError) as exc_info:
            admin.delete_user(admin_user, user_id)
        assert exc_info.value.message == "User ID is required"

    def test_unknown_user(self, admin_user):
        with pytest.raises(NotFoundError):
            admin.delete_user(admin_user, "missing-id")

    def test_deletes_user(self, admin_user, student):
        assert admin.delete_user(admin_user, student.id) == {"success": True}
        with pytest.raises(NotFoundError):
            accounts.get_user(student.id)

    def test_permission_checked_before_id(self, student):
        """A non-admin gets 403 even without a user ID."""
        with pytest.raises(PermissionDeniedError):
            admin.delete_user(student, None)
