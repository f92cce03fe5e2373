"""
Data Models for SocialHub
=========================

Design Philosophy:
------------------
1. The follow graph is a single edge table (Follow), not two arrays
   - Account.following and Account.followers are both views over the same row
   - following/followers can never diverge: there is nothing to keep in sync
   - Unique constraint on (follower, followee) rejects duplicate edges at DB level
   - Check constraint rejects self-follow even if a caller skips the service layer

2. Likes are a (post, user) pair table
   - Unique constraint makes "at most one like per account per post" a DB fact
   - Concurrent likes from the same account: one INSERT wins, the other hits
     IntegrityError and is reported as AlreadyLiked

3. Comments are a child table with their own primary key
   - Stable id for removal, insertion order via (created_at, id)

4. Denormalized counters on Post (like_count, comment_count)
   - Updated with F() expressions, never read-modify-write in Python

Indexes Strategy:
-----------------
- post.author + post.created_at: feed query filters by author set, orders by recency
- follow.follower / follow.followee: audience resolution and follower lists
- comment.post + comment.created_at: ordered comment collection per post
"""

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models
from django.db.models import F, Q
from django.db.models.functions import Lower
from django.utils import timezone


USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 500
POST_TEXT_MAX_LENGTH = 1000
COMMENT_TEXT_MAX_LENGTH = 500

username_validator = RegexValidator(
    regex=r'^[A-Za-z0-9_]{3,30}$',
    message='Username must be 3-30 characters and contain only letters, numbers and underscores.',
)


class Account(AbstractUser):
    """
    A registered user: identity, profile and follow-graph edges.

    Password hashing and is_active handling come from AbstractUser.
    Inactive accounts are refused by the auth backend but kept for
    referential integrity (posts, likes and edges still point at them).
    """

    class Role(models.TextChoices):
        USER = 'user', 'User'
        ADMIN = 'admin', 'Admin'

    username = models.CharField(
        max_length=USERNAME_MAX_LENGTH,
        unique=True,
        validators=[username_validator],
        error_messages={'unique': 'Username already exists'},
    )
    email = models.EmailField(
        unique=True,
        error_messages={'unique': 'Email already exists'},
    )
    first_name = models.CharField(max_length=NAME_MAX_LENGTH)
    last_name = models.CharField(max_length=NAME_MAX_LENGTH)
    bio = models.TextField(max_length=BIO_MAX_LENGTH, blank=True, default='')
    # Opaque reference into the blob store, keyed by owner
    avatar = models.CharField(max_length=255, blank=True, default='')
    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.USER,
    )

    following = models.ManyToManyField(
        'self',
        through='Follow',
        through_fields=('follower', 'followee'),
        symmetrical=False,
        related_name='followers',
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    REQUIRED_FIELDS = ['email', 'first_name', 'last_name']

    class Meta:
        constraints = [
            # Handles are unique regardless of case ("Alice" blocks "alice")
            models.UniqueConstraint(
                Lower('username'),
                name='unique_username_case_insensitive',
            ),
        ]

    def __str__(self):
        return self.username

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN


class Follow(models.Model):
    """
    Directed follow edge: follower receives followee's posts in their feed.

    One row is the whole relationship. Deleting it removes the followee
    from follower.following and the follower from followee.followers
    in the same statement.
    """
    follower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='following_edges',
    )
    followee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='follower_edges',
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['follower', 'followee'],
                name='unique_follow_edge',
            ),
            models.CheckConstraint(
                condition=~Q(follower=F('followee')),
                name='no_self_follow',
            ),
        ]
        indexes = [
            # Audience resolution: who does X follow?
            models.Index(fields=['follower', 'created_at'], name='follow_follower_created_idx'),
            # Follower lists: who follows X?
            models.Index(fields=['followee', 'created_at'], name='follow_followee_created_idx'),
        ]

    def __str__(self):
        return f"{self.follower_id} -> {self.followee_id}"


class Post(models.Model):
    """
    A unit of content with embedded engagement.

    likes is a many-to-many through Like so the pair table carries the
    uniqueness guarantee; like_count/comment_count are derived counters.
    """
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='posts',
    )
    text = models.TextField(max_length=POST_TEXT_MAX_LENGTH)
    # Opaque reference into the blob store, keyed by post
    photo = models.CharField(max_length=255, blank=True, default='')

    likes = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through='Like',
        related_name='liked_posts',
    )

    like_count = models.PositiveIntegerField(default=0)
    comment_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True  # Feed ordering
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # id breaks created_at ties so pagination is deterministic
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['author', '-created_at'], name='post_author_created_idx'),
        ]

    def __str__(self):
        return f"{self.text[:50]} by {self.author_id}"


class Like(models.Model):
    """
    One account's like on one post.

    CONCURRENCY STRATEGY:
    - Unique constraint (post, user) enforced at DB level
    - Service tries the INSERT inside transaction.atomic()
    - IntegrityError means the like already exists -> AlreadyLiked
    """
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='like_records',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='post_likes',
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['post', 'user'],
                name='unique_like_per_user_per_post',
            ),
        ]
        indexes = [
            models.Index(fields=['post', 'created_at'], name='like_post_created_idx'),
        ]

    def __str__(self):
        return f"{self.user_id} liked post {self.post_id}"


class Comment(models.Model):
    """
    Comment on a post.

    Only the comment's own author may delete it. The post's author has
    no moderation rights over other people's comments.
    """
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments',
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='comments',
    )
    text = models.TextField(max_length=COMMENT_TEXT_MAX_LENGTH)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['created_at', 'id']  # Insertion order within a post
        indexes = [
            models.Index(fields=['post', 'created_at'], name='comment_post_created_idx'),
        ]

    def __str__(self):
        return f"Comment by {self.author_id} on {self.post_id}"
