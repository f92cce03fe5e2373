"""
Social App URL Configuration

Path ids are captured as strings so a malformed id reaches the view
and is rejected with a 400 envelope instead of falling through to 404.
"""
from django.urls import path
from .views import (
    AccountActivationView,
    AccountDetailView,
    AccountListView,
    AccountStatsView,
    ChangePasswordView,
    CommentView,
    ConnectionsView,
    FeedView,
    FollowersView,
    FollowingView,
    FollowView,
    LikeView,
    MeView,
    PostDetailView,
    PostListView,
    PostsByAuthorView,
    ProfileView,
    RegisterView,
    SuggestionsView,
    UncommentView,
    UnfollowView,
)

urlpatterns = [
    # Accounts
    path('users/', AccountListView.as_view(), name='user-list'),
    path('users/register/', RegisterView.as_view(), name='user-register'),
    path('users/me/', MeView.as_view(), name='user-me'),
    path('users/profile/', ProfileView.as_view(), name='user-profile'),
    path('users/password/', ChangePasswordView.as_view(), name='user-password'),
    path('users/stats/overview/', AccountStatsView.as_view(), name='user-stats'),

    # Social graph
    path('users/follow/', FollowView.as_view(), name='user-follow'),
    path('users/unfollow/', UnfollowView.as_view(), name='user-unfollow'),
    path('users/suggestions/', SuggestionsView.as_view(), name='user-suggestions'),
    path('users/<str:user_id>/', AccountDetailView.as_view(), name='user-detail'),
    path('users/<str:user_id>/connections/', ConnectionsView.as_view(), name='user-connections'),
    path('users/<str:user_id>/followers/', FollowersView.as_view(), name='user-followers'),
    path('users/<str:user_id>/following/', FollowingView.as_view(), name='user-following'),
    path('users/<str:user_id>/activate/',
         AccountActivationView.as_view(active=True), name='user-activate'),
    path('users/<str:user_id>/deactivate/',
         AccountActivationView.as_view(active=False), name='user-deactivate'),

    # Posts & feed
    path('posts/', PostListView.as_view(), name='post-list'),
    path('posts/feed/', FeedView.as_view(), name='feed'),
    path('posts/by-user/<str:user_id>/', PostsByAuthorView.as_view(), name='posts-by-user'),
    path('posts/like/', LikeView.as_view(like=True), name='post-like'),
    path('posts/unlike/', LikeView.as_view(like=False), name='post-unlike'),
    path('posts/comment/', CommentView.as_view(), name='post-comment'),
    path('posts/uncomment/', UncommentView.as_view(), name='post-uncomment'),
    path('posts/<str:post_id>/', PostDetailView.as_view(), name='post-detail'),
]
