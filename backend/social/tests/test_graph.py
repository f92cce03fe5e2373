"""
Tests for the social graph service.

Focus areas:
1. Symmetry: B in A.following <=> A in B.followers, always
2. Idempotent follow/unfollow
3. Suggestions exclude self, followees and inactive accounts
"""

import itertools
import random

from django.db import IntegrityError
from django.test import TestCase, override_settings
from unittest.mock import patch

from social.exceptions import InvalidOperation, NotFound, ValidationError
from social.graph import follow, get_connections, get_followers, get_following, get_suggestions, unfollow
from social.models import Follow

from .helpers import make_account


class FollowTestCase(TestCase):

    def setUp(self):
        self.alice = make_account('alice')
        self.bob = make_account('bob')

    def test_follow_creates_edge_on_both_sides(self):
        result = follow(self.alice, self.bob.id)

        self.assertEqual(result.action, 'followed')
        self.assertTrue(result.is_following)
        self.assertEqual(result.following_count, 1)
        self.assertEqual(result.followers_count, 1)
        self.assertIn(self.bob, self.alice.following.all())
        self.assertIn(self.alice, self.bob.followers.all())

    def test_follow_twice_is_noop(self):
        follow(self.alice, self.bob.id)
        result = follow(self.alice, self.bob.id)

        self.assertEqual(result.action, 'already_following')
        self.assertTrue(result.is_following)
        self.assertEqual(Follow.objects.filter(follower=self.alice, followee=self.bob).count(), 1)

    def test_follow_race_collapses_to_one_edge(self):
        """
        Simulate the loser of a concurrent follow: the pre-check saw no edge,
        but the INSERT hits the unique constraint.
        """
        Follow.objects.create(follower=self.alice, followee=self.bob)

        with patch('social.graph.Follow.objects.create', side_effect=IntegrityError):
            with patch('social.graph.Follow.objects.filter') as mock_filter:
                mock_filter.return_value.exists.side_effect = [False, True]
                mock_filter.return_value.count.return_value = 1
                result = follow(self.alice, self.bob.id)

        self.assertEqual(result.action, 'already_following')
        self.assertEqual(Follow.objects.count(), 1)

    def test_self_follow_rejected(self):
        with self.assertRaises(InvalidOperation):
            follow(self.alice, self.alice.id)
        self.assertEqual(Follow.objects.count(), 0)

    def test_follow_unknown_account(self):
        with self.assertRaises(NotFound):
            follow(self.alice, 999999)

    def test_follow_inactive_account_allowed(self):
        self.bob.is_active = False
        self.bob.save()

        result = follow(self.alice, self.bob.id)
        self.assertEqual(result.action, 'followed')

    def test_unfollow_removes_both_sides(self):
        follow(self.alice, self.bob.id)
        result = unfollow(self.alice, self.bob.id)

        self.assertEqual(result.action, 'unfollowed')
        self.assertFalse(result.is_following)
        self.assertFalse(self.alice.following.exists())
        self.assertFalse(self.bob.followers.exists())

    def test_unfollow_when_not_following_is_noop(self):
        result = unfollow(self.alice, self.bob.id)

        self.assertEqual(result.action, 'not_following')
        self.assertFalse(result.is_following)

    def test_unfollow_self_rejected(self):
        with self.assertRaises(InvalidOperation):
            unfollow(self.alice, self.alice.id)

    def test_unfollow_unknown_account(self):
        with self.assertRaises(NotFound):
            unfollow(self.alice, 999999)

    def test_follow_is_directed(self):
        follow(self.alice, self.bob.id)
        self.assertFalse(self.bob.following.filter(id=self.alice.id).exists())


class SymmetryPropertyTestCase(TestCase):
    """Random follow/unfollow sequences never break the bidirectional invariant."""

    def test_symmetry_after_random_operations(self):
        accounts = [make_account(f'user{i}') for i in range(5)]
        rng = random.Random(1234)

        for _ in range(60):
            actor, target = rng.sample(accounts, 2)
            if rng.random() < 0.6:
                follow(actor, target.id)
            else:
                unfollow(actor, target.id)

        for a, b in itertools.permutations(accounts, 2):
            in_following = a.following.filter(id=b.id).exists()
            in_followers = b.followers.filter(id=a.id).exists()
            self.assertEqual(in_following, in_followers)
            self.assertLessEqual(
                Follow.objects.filter(follower=a, followee=b).count(), 1
            )
        for account in accounts:
            self.assertFalse(account.following.filter(id=account.id).exists())


class SuggestionsTestCase(TestCase):

    def setUp(self):
        self.viewer = make_account('viewer')
        self.followed = make_account('followed')
        self.stranger = make_account('stranger')
        self.inactive = make_account('inactive', is_active=False)
        follow(self.viewer, self.followed.id)

    def test_excludes_self_followed_and_inactive(self):
        suggestions = get_suggestions(self.viewer)
        ids = {account.id for account in suggestions}

        self.assertEqual(ids, {self.stranger.id})

    def test_marked_not_following(self):
        suggestions = get_suggestions(self.viewer)
        self.assertTrue(all(account.is_following is False for account in suggestions))

    def test_limit(self):
        for i in range(5):
            make_account(f'extra{i}')
        self.assertEqual(len(get_suggestions(self.viewer, limit=3)), 3)

    @override_settings(SUGGESTIONS_MAX_LIMIT=5)
    def test_limit_out_of_range(self):
        with self.assertRaises(ValidationError):
            get_suggestions(self.viewer, limit=6)
        with self.assertRaises(ValidationError):
            get_suggestions(self.viewer, limit=0)


class ConnectionsTestCase(TestCase):

    def setUp(self):
        self.alice = make_account('alice')
        self.bob = make_account('bob')
        self.carol = make_account('carol')
        follow(self.alice, self.bob.id)
        follow(self.carol, self.alice.id)

    def test_connections(self):
        connections = get_connections(self.alice.id)

        self.assertEqual(connections['following'], [self.bob])
        self.assertEqual(connections['followers'], [self.carol])

    def test_followers_and_following(self):
        self.assertEqual(get_followers(self.bob.id), [self.alice])
        self.assertEqual(get_following(self.carol.id), [self.alice])

    def test_unknown_user(self):
        with self.assertRaises(NotFound):
            get_connections(999999)
