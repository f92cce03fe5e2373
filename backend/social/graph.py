"""
Social Graph Service
====================

Follow / unfollow / suggestions / connections over the Follow edge table.

SYMMETRY:
---------
A follow relationship is ONE row in Follow. Account.following and
Account.followers are both read from that row, so "B in A.following"
and "A in B.followers" are the same fact. Follow and unfollow are
single-row writes: there is no half-applied state to recover from.

CONCURRENCY:
------------
Two concurrent follow(A, B) calls both pass the existence check, both
INSERT. The unique constraint on (follower, followee) lets exactly one
through; the loser gets IntegrityError, which we treat as "already
following" - the end state is what the caller asked for.
"""

import logging
from typing import Dict, List, Literal, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import BooleanField, Value

from .exceptions import InvalidOperation, NotFound, ValidationError
from .models import Account, Follow

logger = logging.getLogger(__name__)


class FollowResult:
    """Relationship state after a follow/unfollow call."""
    def __init__(
        self,
        action: Literal['followed', 'already_following', 'unfollowed', 'not_following'],
        is_following: bool,
        following_count: int,
        followers_count: int,
    ):
        self.action = action
        self.is_following = is_following
        self.following_count = following_count
        self.followers_count = followers_count


def _get_account(account_id: int, message: str = 'User not found') -> Account:
    try:
        return Account.objects.get(id=account_id)
    except Account.DoesNotExist:
        raise NotFound(message)


def _result(action, actor: Account, target: Account) -> FollowResult:
    return FollowResult(
        action=action,
        is_following=Follow.objects.filter(follower=actor, followee=target).exists(),
        following_count=Follow.objects.filter(follower=actor).count(),
        followers_count=Follow.objects.filter(followee=target).count(),
    )


def follow(actor: Account, target_id: int) -> FollowResult:
    """
    actor starts following target.

    Idempotent: following someone you already follow is a no-op success.
    """
    if actor.id == target_id:
        raise InvalidOperation('Cannot follow yourself')

    target = _get_account(target_id, 'User to follow not found')

    if Follow.objects.filter(follower=actor, followee=target).exists():
        return _result('already_following', actor, target)

    try:
        with transaction.atomic():
            Follow.objects.create(follower=actor, followee=target)
    except IntegrityError:
        # Lost the race to a concurrent follow of the same edge
        logger.debug("Concurrent follow %s -> %s collapsed", actor.id, target.id)
        return _result('already_following', actor, target)

    logger.info("Account %s followed %s", actor.id, target.id)
    return _result('followed', actor, target)


def unfollow(actor: Account, target_id: int) -> FollowResult:
    """
    actor stops following target.

    Idempotent: unfollowing someone you don't follow is a no-op success.
    """
    if actor.id == target_id:
        raise InvalidOperation('Cannot unfollow yourself')

    target = _get_account(target_id, 'User to unfollow not found')

    deleted_count, _ = Follow.objects.filter(follower=actor, followee=target).delete()
    if deleted_count == 0:
        return _result('not_following', actor, target)

    logger.info("Account %s unfollowed %s", actor.id, target.id)
    return _result('unfollowed', actor, target)


def get_suggestions(viewer: Account, limit: Optional[int] = None) -> List[Account]:
    """
    Accounts the viewer might follow.

    Excludes the viewer, accounts already followed and inactive accounts.
    Newest accounts first; no ranking beyond that. Every result carries
    is_following=False since followed accounts are filtered out.
    """
    if limit is None:
        limit = settings.SUGGESTIONS_DEFAULT_LIMIT
    max_limit = settings.SUGGESTIONS_MAX_LIMIT
    if limit < 1 or limit > max_limit:
        raise ValidationError(f'Limit must be between 1 and {max_limit}')

    followed_ids = Follow.objects.filter(follower=viewer).values('followee_id')

    return list(
        Account.objects
        .filter(is_active=True)
        .exclude(id=viewer.id)
        .exclude(id__in=followed_ids)
        .annotate(is_following=Value(False, output_field=BooleanField()))
        .order_by('-created_at', '-id')[:limit]
    )


def get_followers(user_id: int) -> List[Account]:
    user = _get_account(user_id)
    return list(user.followers.order_by('username'))


def get_following(user_id: int) -> List[Account]:
    user = _get_account(user_id)
    return list(user.following.order_by('username'))


def get_connections(user_id: int) -> Dict[str, List[Account]]:
    """Followers and followees of an account."""
    user = _get_account(user_id)
    return {
        'followers': list(user.followers.order_by('username')),
        'following': list(user.following.order_by('username')),
    }
