"""
Feed Composer
=============

Read side of the post store: the personalized feed, per-author listings
and single-post detail.

THE FEED QUERY:
---------------
1. Resolve the audience: {viewer} + everyone the viewer follows (1 query)
2. Page posts whose author is in the audience, newest first (2 queries:
   COUNT for the envelope, SELECT ... LIMIT/OFFSET for the slice)
3. Load authors, likes and comment authors without N+1:
   - select_related('author')               -> JOIN
   - prefetch_related('likes')              -> 1 query
   - Prefetch('comments', author JOINed)    -> 1 query

Steps 1 and 2 are separate reads. A follow/unfollow that lands between
them may or may not show up in this page; the next request picks it up.

ORDERING:
---------
(-created_at, -id). Two posts can share a timestamp; id makes the order
total so offset pages never skip or repeat a post.
"""

import math
from typing import List, Optional, Set, TypedDict

from django.conf import settings
from django.db.models import Prefetch, QuerySet

from .exceptions import NotFound, ValidationError
from .models import Account, Comment, Follow, Post


class Page(TypedDict):
    """One page of results plus the pagination envelope fields."""
    items: List
    total: int
    page: int
    limit: int
    pages: int


def validate_pagination(page, limit, max_limit: int) -> None:
    """Reject, never clamp, out-of-range pagination parameters."""
    if not isinstance(page, int) or page < 1:
        raise ValidationError('Page must be a positive integer')
    if not isinstance(limit, int) or limit < 1 or limit > max_limit:
        raise ValidationError(f'Limit must be between 1 and {max_limit}')


def paginate(queryset: QuerySet, page: int, limit: int) -> Page:
    """
    Offset pagination over an ordered queryset.

    A page past the end is an empty slice, not an error: the caller still
    gets total/pages and can tell it ran off the end.
    """
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit]) if offset < total else []
    return {
        'items': items,
        'total': total,
        'page': page,
        'limit': limit,
        'pages': math.ceil(total / limit),
    }


def posts_with_engagement() -> QuerySet:
    """
    Base post queryset with everything the serializers touch preloaded.

    Only lightweight author fields are needed downstream, but the JOIN
    is cheaper than a second round trip.
    """
    return (
        Post.objects
        .select_related('author')
        .prefetch_related(
            'likes',
            Prefetch(
                'comments',
                queryset=Comment.objects.select_related('author').order_by('created_at', 'id'),
            ),
        )
        .order_by('-created_at', '-id')
    )


def resolve_audience(viewer_id: int) -> Set[int]:
    """Authors whose posts appear in the viewer's feed: self + followees."""
    followee_ids = (
        Follow.objects
        .filter(follower_id=viewer_id)
        .values_list('followee_id', flat=True)
    )
    return {viewer_id, *followee_ids}


def get_feed(viewer: Account, page: int = 1, limit: Optional[int] = None) -> Page:
    """
    Personalized reverse-chronological feed for the viewer.

    Viewer follows nobody -> only the viewer's own posts.
    """
    if limit is None:
        limit = settings.FEED_DEFAULT_PAGE_SIZE
    validate_pagination(page, limit, settings.FEED_MAX_PAGE_SIZE)

    audience = resolve_audience(viewer.id)
    queryset = posts_with_engagement().filter(author_id__in=audience)
    return paginate(queryset, page, limit)


def get_posts_by_author(author_id: int, page: int = 1, limit: Optional[int] = None) -> Page:
    """Same pagination contract as the feed, audience fixed to one author."""
    if limit is None:
        limit = settings.FEED_DEFAULT_PAGE_SIZE
    validate_pagination(page, limit, settings.FEED_MAX_PAGE_SIZE)

    if not Account.objects.filter(id=author_id).exists():
        raise NotFound('User not found')

    queryset = posts_with_engagement().filter(author_id=author_id)
    return paginate(queryset, page, limit)


def get_post_detail(post_id: int) -> Post:
    post = posts_with_engagement().filter(id=post_id).first()
    if post is None:
        raise NotFound('Post not found')
    return post
