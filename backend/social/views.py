"""
DRF Views
=========

Thin HTTP layer over the graph, feed, engagement and account services.

Every response uses the same envelope:
- success:   {"success": true, "message": ..., "data": ...}
- paginated: {"success": true, "message": ..., "count", "total",
              "pagination": {"page", "limit", "pages"}, "data": [...]}
- failure:   rendered by exceptions.custom_exception_handler

Views never catch domain errors; services raise, the handler renders.
The caller identity is always request.user - ids in the body only name
the target of an action, never the actor.
"""

from django.contrib.auth import update_session_auth_hash
from rest_framework import permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response

from . import accounts, graph, queries, services
from .exceptions import ValidationError
from .permissions import IsAdminRole
from .serializers import (
    AccountListParamsSerializer,
    AccountSerializer,
    AccountSummarySerializer,
    AdminAccountUpdateSerializer,
    ChangePasswordSerializer,
    CommentCreateSerializer,
    FollowActionSerializer,
    FollowResultSerializer,
    LikeActionSerializer,
    LikeResultSerializer,
    PaginationParamsSerializer,
    PostCreateSerializer,
    PostSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    SuggestionParamsSerializer,
    SuggestionSerializer,
    UncommentSerializer,
)


def success_response(data=None, message='Success', status_code=status.HTTP_200_OK):
    return Response(
        {'success': True, 'message': message, 'data': data},
        status=status_code,
    )


def paginated_response(page, data, message='Success'):
    return Response({
        'success': True,
        'message': message,
        'count': len(data),
        'total': page['total'],
        'pagination': {
            'page': page['page'],
            'limit': page['limit'],
            'pages': page['pages'],
        },
        'data': data,
    })


def _validated(serializer_class, data):
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _path_id(value, label):
    """Path ids arrive as strings; a malformed one is a 400, not a 404."""
    if not (value.isascii() and value.isdigit()) or int(value) < 1:
        raise ValidationError(f'Invalid {label} ID')
    return int(value)


# ============================================================================
# ACCOUNTS
# ============================================================================

class RegisterView(APIView):
    """
    POST /api/users/register/

    Create an account. Duplicate username (any case) or email -> 409.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        data = _validated(RegisterSerializer, request.data)
        account = accounts.register_account(**data)
        return success_response(
            AccountSerializer(account).data,
            'User registered successfully',
            status.HTTP_201_CREATED,
        )


class MeView(APIView):
    """GET /api/users/me/"""

    def get(self, request):
        return success_response(AccountSerializer(request.user).data)


class ProfileView(APIView):
    """
    PUT /api/users/profile/

    The caller edits their own first/last name, bio and avatar.
    """

    def put(self, request):
        data = _validated(ProfileUpdateSerializer, request.data)
        account = accounts.update_profile(request.user, **data)
        return success_response(AccountSerializer(account).data, 'Profile updated successfully')


class ChangePasswordView(APIView):
    """
    PUT /api/users/password/   {"current_password": ..., "new_password": ...}

    Wrong current password -> 400. The caller's session stays valid.
    """

    def put(self, request):
        data = _validated(ChangePasswordSerializer, request.data)
        accounts.change_password(request.user, data['current_password'], data['new_password'])
        update_session_auth_hash(request, request.user)
        return success_response(message='Password updated successfully')


class AccountListView(APIView):
    """
    GET /api/users/?page=&limit=&search=&role=

    Admin only. Newest accounts first.
    """
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def get(self, request):
        params = _validated(AccountListParamsSerializer, request.query_params)
        page = accounts.list_accounts(
            page=params['page'],
            limit=params['limit'],
            search=params.get('search') or None,
            role=params.get('role'),
        )
        return paginated_response(page, AccountSerializer(page['items'], many=True).data)


class AccountStatsView(APIView):
    """GET /api/users/stats/overview/ (admin)"""
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def get(self, request):
        return success_response(accounts.get_account_stats())


class AccountDetailView(APIView):
    """
    GET /api/users/<id>/  - owner or admin
    PUT /api/users/<id>/  - admin
    """

    def get_permissions(self):
        if self.request.method == 'PUT':
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def get(self, request, user_id):
        account = accounts.get_account(request.user, _path_id(user_id, 'user'))
        return success_response(AccountSerializer(account).data)

    def put(self, request, user_id):
        user_id = _path_id(user_id, 'user')
        data = _validated(AdminAccountUpdateSerializer, request.data)
        account = accounts.admin_update_account(request.user, user_id, **data)
        return success_response(AccountSerializer(account).data, 'User updated successfully')


class AccountActivationView(APIView):
    """
    PUT /api/users/<id>/activate/
    PUT /api/users/<id>/deactivate/

    Admin only. Accounts are deactivated, never deleted.
    """
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]
    active = True

    def put(self, request, user_id):
        account = accounts.set_active(request.user, _path_id(user_id, 'user'), self.active)
        verb = 'activated' if self.active else 'deactivated'
        return success_response(AccountSerializer(account).data, f'User {verb} successfully')


# ============================================================================
# SOCIAL GRAPH
# ============================================================================

class FollowView(APIView):
    """
    POST /api/users/follow/   {"target_id": 42}

    Following someone already followed is a no-op success.
    """

    def post(self, request):
        data = _validated(FollowActionSerializer, request.data)
        result = graph.follow(request.user, data['target_id'])
        message = ('Already following this user' if result.action == 'already_following'
                   else 'Successfully followed user')
        return success_response(FollowResultSerializer(result).data, message)


class UnfollowView(APIView):
    """
    PUT /api/users/unfollow/   {"target_id": 42}

    Unfollowing someone not followed is a no-op success.
    """

    def put(self, request):
        data = _validated(FollowActionSerializer, request.data)
        result = graph.unfollow(request.user, data['target_id'])
        message = ('Not following this user' if result.action == 'not_following'
                   else 'Successfully unfollowed user')
        return success_response(FollowResultSerializer(result).data, message)


class SuggestionsView(APIView):
    """GET /api/users/suggestions/?limit="""

    def get(self, request):
        params = _validated(SuggestionParamsSerializer, request.query_params)
        suggestions = graph.get_suggestions(request.user, params.get('limit'))
        return success_response(SuggestionSerializer(suggestions, many=True).data)


class ConnectionsView(APIView):
    """GET /api/users/<id>/connections/"""

    def get(self, request, user_id):
        connections = graph.get_connections(_path_id(user_id, 'user'))
        return success_response({
            'followers': AccountSummarySerializer(connections['followers'], many=True).data,
            'following': AccountSummarySerializer(connections['following'], many=True).data,
        })


class FollowersView(APIView):
    """GET /api/users/<id>/followers/"""

    def get(self, request, user_id):
        followers = graph.get_followers(_path_id(user_id, 'user'))
        return success_response(AccountSummarySerializer(followers, many=True).data)


class FollowingView(APIView):
    """GET /api/users/<id>/following/"""

    def get(self, request, user_id):
        following = graph.get_following(_path_id(user_id, 'user'))
        return success_response(AccountSummarySerializer(following, many=True).data)


# ============================================================================
# POSTS & FEED
# ============================================================================

class FeedView(APIView):
    """
    GET /api/posts/feed/?page=&limit=

    Feed = the caller's posts + posts from accounts they follow,
    newest first.
    """

    def get(self, request):
        params = _validated(PaginationParamsSerializer, request.query_params)
        page = queries.get_feed(request.user, params['page'], params.get('limit'))
        return paginated_response(page, PostSerializer(page['items'], many=True).data)


class PostListView(FeedView):
    """
    GET  /api/posts/   same as the feed
    POST /api/posts/   {"text": ..., "photo": ...}
    """

    def post(self, request):
        data = _validated(PostCreateSerializer, request.data)
        post = services.create_post(request.user, data['text'], data.get('photo', ''))
        post = queries.get_post_detail(post.id)
        return success_response(
            PostSerializer(post).data,
            'Post created successfully',
            status.HTTP_201_CREATED,
        )


class PostsByAuthorView(APIView):
    """GET /api/posts/by-user/<id>/?page=&limit="""

    def get(self, request, user_id):
        user_id = _path_id(user_id, 'user')
        params = _validated(PaginationParamsSerializer, request.query_params)
        page = queries.get_posts_by_author(user_id, params['page'], params.get('limit'))
        return paginated_response(page, PostSerializer(page['items'], many=True).data)


class PostDetailView(APIView):
    """
    GET    /api/posts/<id>/
    DELETE /api/posts/<id>/   - author only
    """

    def get(self, request, post_id):
        post = queries.get_post_detail(_path_id(post_id, 'post'))
        return success_response(PostSerializer(post).data)

    def delete(self, request, post_id):
        services.delete_post(request.user, _path_id(post_id, 'post'))
        return success_response(message='Post deleted successfully')


class LikeView(APIView):
    """
    PUT /api/posts/like/     {"post_id": 7}
    PUT /api/posts/unlike/   {"post_id": 7}

    Double like -> 409 already_liked; unlike without like -> 409 not_liked.
    """
    like = True

    def put(self, request):
        data = _validated(LikeActionSerializer, request.data)
        if self.like:
            result = services.like_post(request.user, data['post_id'])
            message = 'Post liked successfully'
        else:
            result = services.unlike_post(request.user, data['post_id'])
            message = 'Post unliked successfully'
        return success_response(LikeResultSerializer(result).data, message)


class CommentView(APIView):
    """PUT /api/posts/comment/   {"post_id": 7, "text": "..."}"""

    def put(self, request):
        data = _validated(CommentCreateSerializer, request.data)
        post = services.add_comment(request.user, data['post_id'], data['text'])
        return success_response(PostSerializer(post).data, 'Comment added successfully')


class UncommentView(APIView):
    """
    PUT /api/posts/uncomment/   {"post_id": 7, "comment_id": 3}

    Only the comment's author may remove it.
    """

    def put(self, request):
        data = _validated(UncommentSerializer, request.data)
        post = services.remove_comment(request.user, data['post_id'], data['comment_id'])
        return success_response(PostSerializer(post).data, 'Comment removed successfully')
