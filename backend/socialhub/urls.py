"""
SocialHub URL Configuration
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def api_root(request):
    """Root endpoint with API information."""
    return JsonResponse({
        'message': 'SocialHub API Server',
        'version': '1.0',
        'endpoints': {
            'users': '/api/users/',
            'follow': '/api/users/follow/',
            'suggestions': '/api/users/suggestions/',
            'feed': '/api/posts/feed/',
            'posts': '/api/posts/<id>/',
            'like': '/api/posts/like/',
            'comment': '/api/posts/comment/',
        },
        'admin': '/admin/',
    })


def not_found(request, exception=None):
    """Unmatched routes get the same failure envelope as the API."""
    return JsonResponse(
        {'success': False, 'message': 'Route not found', 'error': 'not_found'},
        status=404,
    )


def server_error(request):
    return JsonResponse(
        {'success': False, 'message': 'An unexpected error occurred.', 'error': 'internal_error'},
        status=500,
    )


urlpatterns = [
    path('', api_root, name='api-root'),
    path('admin/', admin.site.urls),
    path('api/', include('social.urls')),
]

handler404 = not_found
handler500 = server_error
