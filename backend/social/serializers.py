"""
DRF Serializers
===============

Serializers handle:
1. Validation of incoming data (ids, pagination params, text, profile fields)
2. Transformation of model instances to JSON
3. Lightweight author projections embedded in posts and comments

DESIGN DECISIONS:
-----------------
1. AccountSummarySerializer is the only account shape embedded anywhere
   (posts, comments, connections, suggestions) - never the full record
2. Input serializers are plain Serializers: uniqueness is the service's
   job so duplicates surface as 409 Conflict, not 400
3. Password is write-only and never serialized outward
"""

from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .models import (
    Account,
    Comment,
    Post,
    username_validator,
    BIO_MAX_LENGTH,
    COMMENT_TEXT_MAX_LENGTH,
    NAME_MAX_LENGTH,
    POST_TEXT_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)


class AccountSummarySerializer(serializers.ModelSerializer):
    """Minimal account representation for embedding in other objects."""

    class Meta:
        model = Account
        fields = ['id', 'username', 'first_name', 'last_name', 'avatar']
        read_only_fields = fields


class SuggestionSerializer(AccountSummarySerializer):
    is_following = serializers.BooleanField(read_only=True)

    class Meta(AccountSummarySerializer.Meta):
        fields = AccountSummarySerializer.Meta.fields + ['is_following']
        read_only_fields = fields


class AccountSerializer(serializers.ModelSerializer):
    """Full profile, for the owner or an admin."""
    following_count = serializers.SerializerMethodField()
    followers_count = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'bio',
            'avatar',
            'role',
            'is_active',
            'following_count',
            'followers_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    # accounts.list_accounts() annotates both counts; single lookups don't
    def get_following_count(self, obj):
        count = getattr(obj, 'following_count', None)
        return obj.following_edges.count() if count is None else count

    def get_followers_count(self, obj):
        count = getattr(obj, 'followers_count', None)
        return obj.follower_edges.count() if count is None else count


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(
        min_length=USERNAME_MIN_LENGTH,
        max_length=USERNAME_MAX_LENGTH,
        validators=[username_validator],
    )
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    first_name = serializers.CharField(max_length=NAME_MAX_LENGTH)
    last_name = serializers.CharField(max_length=NAME_MAX_LENGTH)

    def validate(self, attrs):
        # unsaved account so the similarity check sees username/email/names
        candidate = Account(
            username=attrs['username'],
            email=attrs['email'],
            first_name=attrs['first_name'],
            last_name=attrs['last_name'],
        )
        try:
            validate_password(attrs['password'], user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({'password': list(exc.messages)})
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(min_length=6, write_only=True)


class ProfileUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=NAME_MAX_LENGTH, required=False)
    last_name = serializers.CharField(max_length=NAME_MAX_LENGTH, required=False)
    bio = serializers.CharField(max_length=BIO_MAX_LENGTH, required=False, allow_blank=True)
    avatar = serializers.CharField(max_length=255, required=False, allow_blank=True)


class AdminAccountUpdateSerializer(ProfileUpdateSerializer):
    username = serializers.CharField(
        min_length=USERNAME_MIN_LENGTH,
        max_length=USERNAME_MAX_LENGTH,
        validators=[username_validator],
        required=False,
    )
    email = serializers.EmailField(required=False)
    role = serializers.ChoiceField(choices=Account.Role.choices, required=False)
    # default=None so a form-encoded PUT without the field doesn't read as False
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)


class AccountListParamsSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, default=10)
    search = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=Account.Role.choices, required=False)

    def validate_limit(self, value):
        max_limit = settings.ACCOUNT_LIST_MAX_PAGE_SIZE
        if value > max_limit:
            raise serializers.ValidationError(f'Limit must be between 1 and {max_limit}')
        return value


class PaginationParamsSerializer(serializers.Serializer):
    """page/limit query params for the feed and per-author listings."""
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, required=False)

    def validate_limit(self, value):
        max_limit = settings.FEED_MAX_PAGE_SIZE
        if value > max_limit:
            raise serializers.ValidationError(f'Limit must be between 1 and {max_limit}')
        return value


class SuggestionParamsSerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, required=False)

    def validate_limit(self, value):
        max_limit = settings.SUGGESTIONS_MAX_LIMIT
        if value > max_limit:
            raise serializers.ValidationError(f'Limit must be between 1 and {max_limit}')
        return value


class FollowActionSerializer(serializers.Serializer):
    target_id = serializers.IntegerField(min_value=1)


class FollowResultSerializer(serializers.Serializer):
    action = serializers.CharField()
    is_following = serializers.BooleanField()
    following_count = serializers.IntegerField()
    followers_count = serializers.IntegerField()


class CommentSerializer(serializers.ModelSerializer):
    author = AccountSummarySerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'text', 'author', 'created_at']
        read_only_fields = fields


class PostSerializer(serializers.ModelSerializer):
    """
    Post with engagement.

    Expects the queryset from queries.posts_with_engagement() so author,
    likes and comment authors are already loaded.
    """
    author = AccountSummarySerializer(read_only=True)
    likes = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    comments = CommentSerializer(many=True, read_only=True)

    class Meta:
        model = Post
        fields = [
            'id',
            'text',
            'photo',
            'author',
            'likes',
            'like_count',
            'comments',
            'comment_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PostCreateSerializer(serializers.Serializer):
    """
    Author is set from request.user in the view, not from input.
    This prevents users from creating posts as other users.
    """
    text = serializers.CharField(max_length=POST_TEXT_MAX_LENGTH)
    photo = serializers.CharField(max_length=255, required=False, allow_blank=True)


class LikeActionSerializer(serializers.Serializer):
    post_id = serializers.IntegerField(min_value=1)


class LikeResultSerializer(serializers.Serializer):
    action = serializers.CharField()
    likes = serializers.ListField(child=serializers.IntegerField())
    like_count = serializers.IntegerField()


class CommentCreateSerializer(serializers.Serializer):
    post_id = serializers.IntegerField(min_value=1)
    text = serializers.CharField(max_length=COMMENT_TEXT_MAX_LENGTH)


class UncommentSerializer(serializers.Serializer):
    post_id = serializers.IntegerField(min_value=1)
    comment_id = serializers.IntegerField(min_value=1)
