"""
Engagement Service
==================

Write side of the post store: create/delete posts, like/unlike,
comment/uncomment.

CONCURRENCY STRATEGY:
---------------------
Problem: The same account double-clicks "like"
Naive: Check if exists -> Create if not -> RACE CONDITION!

Solution: Unique Constraint + IntegrityError (optimistic)
    - Try to insert the (post, user) row
    - DB rejects the duplicate (unique constraint violation)
    - Catch IntegrityError, raise AlreadyLiked

No pre-check is needed: the constraint is the check, so the
check-and-write is one atomic statement per post.

TRANSACTION STRATEGY:
--------------------
Like row + like_count increment run in one transaction.
If either fails, both are rolled back -> counter never drifts.

OWNERSHIP:
----------
- A post can only be deleted by its author.
- A comment can only be deleted by the comment's author. The post's
  author does NOT moderate other people's comments.
"""

import logging
from typing import List, Literal

from django.db import transaction, IntegrityError
from django.db.models import F

from .exceptions import AlreadyLiked, Forbidden, NotFound, NotLiked, ValidationError
from .models import Account, Comment, Like, Post, COMMENT_TEXT_MAX_LENGTH, POST_TEXT_MAX_LENGTH
from .queries import get_post_detail

logger = logging.getLogger(__name__)


class LikeResult:
    """Like state of a post after a like/unlike call."""
    def __init__(
        self,
        action: Literal['liked', 'unliked'],
        likes: List[int],
    ):
        self.action = action
        self.likes = likes
        self.like_count = len(likes)


def _get_post(post_id: int) -> Post:
    try:
        return Post.objects.get(id=post_id)
    except Post.DoesNotExist:
        raise NotFound('Post not found')


def _clean_text(text, max_length: int, label: str) -> str:
    """Strip and length-check user text. Whitespace-only counts as empty."""
    text = (text or '').strip()
    if not text:
        raise ValidationError(f'{label} text is required')
    if len(text) > max_length:
        raise ValidationError(f'{label} cannot exceed {max_length} characters')
    return text


def _like_result(post_id: int, action) -> LikeResult:
    likes = list(
        Like.objects
        .filter(post_id=post_id)
        .order_by('created_at', 'id')
        .values_list('user_id', flat=True)
    )
    return LikeResult(action=action, likes=likes)


def create_post(author: Account, text: str, photo: str = '') -> Post:
    text = _clean_text(text, POST_TEXT_MAX_LENGTH, 'Post')
    post = Post.objects.create(author=author, text=text, photo=photo or '')
    logger.info("Account %s created post %s", author.id, post.id)
    return post


def delete_post(user: Account, post_id: int) -> None:
    """Delete a post and, by cascade, its likes and comments."""
    post = _get_post(post_id)
    if post.author_id != user.id:
        raise Forbidden('Not authorized to delete this post')

    post.delete()
    logger.info("Account %s deleted post %s", user.id, post_id)


def like_post(user: Account, post_id: int) -> LikeResult:
    """
    Like a post atomically.

    OPERATION:
    1. Get post (verify exists)
    2. Try to create Like (unique constraint prevents duplicates)
    3. If success: increment counter
    4. If IntegrityError: Like already exists -> AlreadyLiked
    """
    post = _get_post(post_id)

    try:
        with transaction.atomic():
            Like.objects.create(post=post, user=user)
            # F() for atomic increment - no read-modify-write race
            Post.objects.filter(id=post.id).update(like_count=F('like_count') + 1)
    except IntegrityError:
        raise AlreadyLiked()

    logger.info("Account %s liked post %s", user.id, post.id)
    return _like_result(post.id, 'liked')


def unlike_post(user: Account, post_id: int) -> LikeResult:
    """Remove a like. Unliking a post you haven't liked is NotLiked."""
    post = _get_post(post_id)

    with transaction.atomic():
        deleted_count, _ = Like.objects.filter(post=post, user=user).delete()
        if deleted_count > 0:
            Post.objects.filter(id=post.id).update(like_count=F('like_count') - 1)

    if deleted_count == 0:
        raise NotLiked()

    logger.info("Account %s unliked post %s", user.id, post.id)
    return _like_result(post.id, 'unliked')


def add_comment(user: Account, post_id: int, text: str) -> Post:
    """
    Append a comment to a post.

    Returns the updated post with its full, ordered comment collection.
    comment_count is bumped by the post_save signal.
    """
    text = _clean_text(text, COMMENT_TEXT_MAX_LENGTH, 'Comment')
    post = _get_post(post_id)

    comment = Comment.objects.create(post=post, author=user, text=text)
    logger.info("Account %s commented %s on post %s", user.id, comment.id, post.id)
    return get_post_detail(post.id)


def remove_comment(user: Account, post_id: int, comment_id: int) -> Post:
    """
    Delete one comment, leaving the rest in order.

    Only the comment's author may do this - even the post's author gets
    Forbidden for someone else's comment.
    """
    post = _get_post(post_id)

    comment = Comment.objects.filter(id=comment_id, post=post).first()
    if comment is None:
        raise NotFound('Comment not found')
    if comment.author_id != user.id:
        raise Forbidden('Not authorized to delete this comment')

    comment.delete()
    logger.info("Account %s removed comment %s from post %s", user.id, comment_id, post.id)
    return get_post_detail(post.id)
