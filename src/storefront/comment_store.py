"""Product comment storage for storefront."""

from typing import Any

from .errors import CommentNotFoundError, InvalidCommentError
from .json_store import SCHEMA_VERSION, JsonFileStore
from .models import Comment

GUEST_AUTHOR = "Guest"


class CommentStore(JsonFileStore):
    """Manages customer comments and admin replies."""

    FILENAME = "comments.json"

    def empty_document(self) -> dict[str, Any]:
        return {"schema_version": SCHEMA_VERSION, "next_comment_id": 1, "comments": []}

    def add_comment(
        self,
        product_id: int,
        content: str,
        author_name: str | None = None,
        user_id: int | None = None,
    ) -> Comment:
        """
        Add a comment to a product.

        The caller checks that the product exists. A missing author name
        falls back to "Guest".

        Raises:
            InvalidCommentError: If content is blank.
        """
        content = (content or "").strip()
        if not content:
            raise InvalidCommentError("content is required")

        with self.transaction() as data:
            comment = Comment(
                id=self._next_id(data, "next_comment_id"),
                product_id=product_id,
                author_name=(author_name or "").strip() or GUEST_AUTHOR,
                content=content,
                user_id=user_id,
            )
            data["comments"].append(comment.to_dict())
        return comment

    def list_comments(self, product_id: int | None = None) -> list[Comment]:
        """List comments, newest first, optionally for one product."""
        data = self._load_data()
        comments = [Comment.from_dict(c) for c in data.get("comments", [])]
        if product_id is not None:
            comments = [c for c in comments if c.product_id == product_id]
        comments.sort(key=lambda c: c.id, reverse=True)
        return comments

    def get_comment(self, comment_id: int) -> Comment:
        """
        Get a comment by ID.

        Raises:
            CommentNotFoundError: If comment doesn't exist.
        """
        for c in self.list_comments():
            if c.id == comment_id:
                return c
        raise CommentNotFoundError(comment_id)

    def _update(self, comment_id: int, **changes: Any) -> Comment:
        with self.transaction() as data:
            for c in data.get("comments", []):
                if c["id"] == comment_id:
                    c.update(changes)
                    return Comment.from_dict(c)
            raise CommentNotFoundError(comment_id)

    def reply(self, comment_id: int, reply_text: str) -> Comment:
        """
        Set the admin reply on a comment.

        Raises:
            CommentNotFoundError: If comment doesn't exist.
            InvalidCommentError: If the reply is blank.
        """
        reply_text = (reply_text or "").strip()
        if not reply_text:
            raise InvalidCommentError("reply is required")
        return self._update(comment_id, admin_reply=reply_text)

    def update_content(self, comment_id: int, content: str) -> Comment:
        """Replace a comment's text (admin moderation)."""
        content = (content or "").strip()
        if not content:
            raise InvalidCommentError("content is required")
        return self._update(comment_id, content=content)

    def delete_comment(self, comment_id: int) -> Comment:
        """
        Delete a comment.

        Raises:
            CommentNotFoundError: If comment doesn't exist.
        """
        with self.transaction() as data:
            comments = data.get("comments", [])
            for i, c in enumerate(comments):
                if c["id"] == comment_id:
                    return Comment.from_dict(comments.pop(i))
            raise CommentNotFoundError(comment_id)

    def delete_own_comment(self, product_id: int, comment_id: int, user_id: int | None) -> bool:
        """
        Delete a comment on behalf of its author.

        Only comments posted by a signed-in user can be removed this way, and
        only by that same user.

        Returns:
            True if the comment was deleted, False if the caller doesn't own it.
        """
        if user_id is None:
            return False
        with self.transaction() as data:
            comments = data.get("comments", [])
            for i, c in enumerate(comments):
                if (
                    c["id"] == comment_id
                    and c["product_id"] == product_id
                    and c.get("user_id") is not None
                    and c["user_id"] == user_id
                ):
                    comments.pop(i)
                    return True
        return False
