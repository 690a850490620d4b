"""Tests for CommentStore."""

import pytest

from storefront.comment_store import GUEST_AUTHOR
from storefront.errors import CommentNotFoundError, InvalidCommentError


class TestCommentStore:
    def test_add_and_list(self, comment_store):
        comment_store.add_comment(1, "Great case", author_name="Ada")
        comment_store.add_comment(2, "Slow charger")
        comment_store.add_comment(1, "  Fits well  ", user_id=7, author_name="Bob")

        for_product = comment_store.list_comments(1)

        assert [c.content for c in for_product] == ["Fits well", "Great case"]
        assert len(comment_store.list_comments()) == 3

    def test_guest_author(self, comment_store):
        comment = comment_store.add_comment(1, "Nice", author_name="   ")
        assert comment.author_name == GUEST_AUTHOR

    def test_blank_content_rejected(self, comment_store):
        with pytest.raises(InvalidCommentError):
            comment_store.add_comment(1, "   ")

    def test_reply(self, comment_store):
        comment = comment_store.add_comment(1, "Does it fit the Pro model?")

        replied = comment_store.reply(comment.id, "Yes, it does.")

        assert replied.admin_reply == "Yes, it does."
        assert comment_store.get_comment(comment.id).admin_reply == "Yes, it does."

    def test_reply_blank_rejected(self, comment_store):
        comment = comment_store.add_comment(1, "Hello")
        with pytest.raises(InvalidCommentError):
            comment_store.reply(comment.id, "")

    def test_update_content(self, comment_store):
        comment = comment_store.add_comment(1, "typo")

        assert comment_store.update_content(comment.id, "fixed").content == "fixed"

    def test_missing_comment(self, comment_store):
        with pytest.raises(CommentNotFoundError):
            comment_store.get_comment(5)
        with pytest.raises(CommentNotFoundError):
            comment_store.reply(5, "hi")
        with pytest.raises(CommentNotFoundError):
            comment_store.delete_comment(5)

    def test_delete(self, comment_store):
        comment = comment_store.add_comment(1, "bye")

        removed = comment_store.delete_comment(comment.id)

        assert removed.content == "bye"
        assert comment_store.list_comments() == []


class TestDeleteOwnComment:
    def test_owner_can_delete(self, comment_store):
        comment = comment_store.add_comment(1, "mine", user_id=3)

        assert comment_store.delete_own_comment(1, comment.id, 3) is True
        assert comment_store.list_comments() == []

    def test_other_user_cannot_delete(self, comment_store):
        comment = comment_store.add_comment(1, "mine", user_id=3)

        assert comment_store.delete_own_comment(1, comment.id, 4) is False
        assert len(comment_store.list_comments()) == 1

    def test_guest_comment_cannot_be_deleted_by_user(self, comment_store):
        comment = comment_store.add_comment(1, "anonymous")

        assert comment_store.delete_own_comment(1, comment.id, 3) is False
        assert comment_store.delete_own_comment(1, comment.id, None) is False

    def test_wrong_product(self, comment_store):
        comment = comment_store.add_comment(1, "mine", user_id=3)

        assert comment_store.delete_own_comment(2, comment.id, 3) is False
