"""
Management command to seed the database with sample data.

Usage: python manage.py seed_data
"""

import random
from datetime import timedelta
from django.core.management.base import BaseCommand
from django.utils import timezone

from social.exceptions import AlreadyLiked
from social.graph import follow
from social.models import Account, Comment, Follow, Like, Post
from social.services import add_comment, like_post


class Command(BaseCommand):
    help = 'Seed the database with sample accounts, follows, posts, likes and comments'

    def add_arguments(self, parser):
        parser.add_argument(
            '--users',
            type=int,
            default=10,
            help='Number of accounts to create'
        )
        parser.add_argument(
            '--posts',
            type=int,
            default=30,
            help='Number of posts to create'
        )
        parser.add_argument(
            '--comments',
            type=int,
            default=60,
            help='Number of comments to create'
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before seeding'
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            Like.objects.all().delete()
            Comment.objects.all().delete()
            Post.objects.all().delete()
            Follow.objects.all().delete()
            Account.objects.filter(is_superuser=False).delete()

        self.stdout.write('Creating accounts...')
        users = self._create_users(options['users'])

        self.stdout.write('Building follow graph...')
        edges = self._create_follows(users)

        self.stdout.write('Creating posts...')
        posts = self._create_posts(users, options['posts'])

        self.stdout.write('Creating comments...')
        comment_count = self._create_comments(users, posts, options['comments'])

        self.stdout.write('Creating likes...')
        like_count = self._create_likes(users, posts)

        self.stdout.write(self.style.SUCCESS(
            f'Successfully created:\n'
            f'  - {len(users)} accounts\n'
            f'  - {edges} follow edges\n'
            f'  - {len(posts)} posts\n'
            f'  - {comment_count} comments\n'
            f'  - {like_count} likes'
        ))

    def _create_users(self, count):
        users = []
        for i in range(count):
            username = f'user{i+1}'
            user = Account.objects.filter(username=username).first()
            if user is None:
                user = Account.objects.create_user(
                    username=username,
                    email=f'{username}@example.com',
                    password='password123',
                    first_name='User',
                    last_name=str(i + 1),
                )
            users.append(user)
        return users

    def _create_follows(self, users):
        created = 0
        for user in users:
            others = [u for u in users if u.id != user.id]
            for target in random.sample(others, k=min(3, len(others))):
                if follow(user, target.id).action == 'followed':
                    created += 1
        return created

    def _create_posts(self, users, count):
        texts = [
            "Just discovered this amazing trick!",
            "What do you think about remote work?",
            "Check out my latest project",
            "TIL something interesting about coffee",
            "Weekly roundup: good reads and bad puns",
            "Sharing my experience with learning to cook",
        ]

        posts = []
        for i in range(count):
            post = Post.objects.create(
                author=random.choice(users),
                text=f"{random.choice(texts)} #{i+1}",
                created_at=timezone.now() - timedelta(minutes=random.randint(0, 48 * 60)),
            )
            posts.append(post)
        return posts

    def _create_comments(self, users, posts, count):
        if not posts:
            return 0
        comment_texts = [
            "Great point! I totally agree.",
            "Thanks for sharing!",
            "Can you elaborate on this?",
            "Well said!",
            "+1 to this",
        ]
        for _ in range(count):
            add_comment(random.choice(users), random.choice(posts).id, random.choice(comment_texts))
        return count

    def _create_likes(self, users, posts):
        created = 0
        for post in posts:
            for liker in random.sample(users, k=len(users) // 2):
                try:
                    like_post(liker, post.id)
                    created += 1
                except AlreadyLiked:
                    continue
        return created
