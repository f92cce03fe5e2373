from datetime import timedelta

from django.utils import timezone

from social.models import Account, Post


def make_account(username, **extra):
    defaults = {
        'email': f'{username}@test.com',
        'password': 'pass12345',
        'first_name': username.capitalize(),
        'last_name': 'Test',
    }
    defaults.update(extra)
    return Account.objects.create_user(username=username, **defaults)


def make_post(author, text='hello', minutes_ago=0):
    return Post.objects.create(
        author=author,
        text=text,
        created_at=timezone.now() - timedelta(minutes=minutes_ago),
    )
