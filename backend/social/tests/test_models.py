"""
Constraint tests: the database itself refuses broken graph/engagement state,
even when the service layer is bypassed.
"""

from django.db import IntegrityError, transaction
from django.test import TestCase

from social.models import Account, Comment, Follow, Like

from .helpers import make_account, make_post


class FollowConstraintTestCase(TestCase):

    def setUp(self):
        self.alice = make_account('alice')
        self.bob = make_account('bob')

    def test_duplicate_edge_rejected(self):
        Follow.objects.create(follower=self.alice, followee=self.bob)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Follow.objects.create(follower=self.alice, followee=self.bob)

    def test_self_follow_rejected(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Follow.objects.create(follower=self.alice, followee=self.alice)

    def test_edge_visible_from_both_sides(self):
        """One row feeds both adjacency views."""
        Follow.objects.create(follower=self.alice, followee=self.bob)

        self.assertEqual(list(self.alice.following.all()), [self.bob])
        self.assertEqual(list(self.bob.followers.all()), [self.alice])
        self.assertFalse(self.bob.following.exists())
        self.assertFalse(self.alice.followers.exists())


class AccountConstraintTestCase(TestCase):

    def test_username_unique_case_insensitive(self):
        make_account('Alice')
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                make_account('alice', email='other@test.com')

    def test_email_unique(self):
        make_account('alice')
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                make_account('alice2', email='alice@test.com')

    def test_defaults(self):
        account = make_account('alice')
        self.assertEqual(account.role, Account.Role.USER)
        self.assertTrue(account.is_active)
        self.assertFalse(account.is_admin)
        self.assertTrue(account.check_password('pass12345'))
        self.assertNotEqual(account.password, 'pass12345')


class EngagementConstraintTestCase(TestCase):

    def setUp(self):
        self.author = make_account('author')
        self.fan = make_account('fan')
        self.post = make_post(self.author)

    def test_duplicate_like_rejected(self):
        Like.objects.create(post=self.post, user=self.fan)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Like.objects.create(post=self.post, user=self.fan)

    def test_comment_count_follows_comment_rows(self):
        comment = Comment.objects.create(post=self.post, author=self.fan, text='nice')
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 1)

        comment.delete()
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 0)

    def test_deleting_post_cascades_engagement(self):
        Like.objects.create(post=self.post, user=self.fan)
        Comment.objects.create(post=self.post, author=self.fan, text='nice')

        self.post.delete()

        self.assertEqual(Like.objects.count(), 0)
        self.assertEqual(Comment.objects.count(), 0)
