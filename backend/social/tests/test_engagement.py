"""
Tests for the engagement service.

Focus areas:
1. Like uniqueness (AlreadyLiked / NotLiked are reported, not swallowed)
2. Comment ownership (only the comment author may delete it)
3. Post ownership on delete
"""

from django.test import TestCase, TransactionTestCase

from social.exceptions import AlreadyLiked, Forbidden, NotFound, NotLiked, ValidationError
from social.models import Comment, Like, Post
from social.services import add_comment, create_post, delete_post, like_post, remove_comment, unlike_post

from .helpers import make_account, make_post


class LikeTestCase(TransactionTestCase):
    """
    TransactionTestCase so the IntegrityError raised by a duplicate
    like hits a real transaction rollback, as it would in production.
    """

    def setUp(self):
        self.author = make_account('author')
        self.u1 = make_account('u1')
        self.post = make_post(self.author)

    def test_like_unlike_round_trip(self):
        result = like_post(self.u1, self.post.id)
        self.assertEqual(result.action, 'liked')
        self.assertEqual(result.likes, [self.u1.id])

        with self.assertRaises(AlreadyLiked):
            like_post(self.u1, self.post.id)

        result = unlike_post(self.u1, self.post.id)
        self.assertEqual(result.action, 'unliked')
        self.assertEqual(result.likes, [])

        with self.assertRaises(NotLiked):
            unlike_post(self.u1, self.post.id)

    def test_double_like_stores_one_row(self):
        like_post(self.u1, self.post.id)
        with self.assertRaises(AlreadyLiked):
            like_post(self.u1, self.post.id)

        self.assertEqual(Like.objects.filter(post=self.post, user=self.u1).count(), 1)
        self.post.refresh_from_db()
        self.assertEqual(self.post.like_count, 1)

    def test_unlike_without_like(self):
        with self.assertRaises(NotLiked):
            unlike_post(self.u1, self.post.id)
        self.post.refresh_from_db()
        self.assertEqual(self.post.like_count, 0)

    def test_like_count_tracks_likes(self):
        u2 = make_account('u2')
        like_post(self.u1, self.post.id)
        result = like_post(u2, self.post.id)

        self.assertEqual(result.like_count, 2)
        self.assertEqual(result.likes, [self.u1.id, u2.id])
        self.post.refresh_from_db()
        self.assertEqual(self.post.like_count, 2)

    def test_author_may_like_own_post(self):
        result = like_post(self.author, self.post.id)
        self.assertEqual(result.likes, [self.author.id])

    def test_missing_post(self):
        with self.assertRaises(NotFound):
            like_post(self.u1, 999999)
        with self.assertRaises(NotFound):
            unlike_post(self.u1, 999999)


class CommentTestCase(TestCase):

    def setUp(self):
        self.author1 = make_account('author1')
        self.commenter1 = make_account('commenter1')
        self.post = make_post(self.author1)

    def test_add_comment_returns_updated_post(self):
        post = add_comment(self.commenter1, self.post.id, '  first!  ')

        comments = list(post.comments.all())
        self.assertEqual(len(comments), 1)
        self.assertEqual(comments[0].text, 'first!')
        self.assertEqual(comments[0].author_id, self.commenter1.id)
        self.assertIsNotNone(comments[0].created_at)
        self.assertEqual(post.comment_count, 1)

    def test_comments_keep_insertion_order(self):
        for text in ('one', 'two', 'three'):
            post = add_comment(self.commenter1, self.post.id, text)
        self.assertEqual([c.text for c in post.comments.all()], ['one', 'two', 'three'])

    def test_comment_text_validation(self):
        with self.assertRaises(ValidationError):
            add_comment(self.commenter1, self.post.id, '   ')
        with self.assertRaises(ValidationError):
            add_comment(self.commenter1, self.post.id, 'x' * 501)
        add_comment(self.commenter1, self.post.id, 'x' * 500)

    def test_comment_on_missing_post(self):
        with self.assertRaises(NotFound):
            add_comment(self.commenter1, 999999, 'hello')

    def test_comment_delete_authorization(self):
        """The post's author cannot remove someone else's comment."""
        post = add_comment(self.commenter1, self.post.id, 'mine')
        keep = add_comment(self.author1, self.post.id, 'keep me').comments.all()[1]
        comment = post.comments.all()[0]

        with self.assertRaises(Forbidden):
            remove_comment(self.author1, self.post.id, comment.id)

        post = remove_comment(self.commenter1, self.post.id, comment.id)

        self.assertEqual([c.id for c in post.comments.all()], [keep.id])
        self.assertEqual(post.comment_count, 1)

    def test_remove_preserves_order_of_rest(self):
        for text in ('a', 'b', 'c'):
            post = add_comment(self.commenter1, self.post.id, text)
        middle = post.comments.all()[1]

        post = remove_comment(self.commenter1, self.post.id, middle.id)

        self.assertEqual([c.text for c in post.comments.all()], ['a', 'c'])

    def test_remove_missing_comment(self):
        with self.assertRaises(NotFound):
            remove_comment(self.commenter1, self.post.id, 999999)

    def test_remove_comment_from_other_post(self):
        other = make_post(self.author1, 'other')
        comment = Comment.objects.create(post=other, author=self.commenter1, text='elsewhere')

        with self.assertRaises(NotFound):
            remove_comment(self.commenter1, self.post.id, comment.id)


class PostLifecycleTestCase(TestCase):

    def setUp(self):
        self.author = make_account('author')
        self.other = make_account('other')

    def test_create_post(self):
        post = create_post(self.author, '  hello world  ', photo='blob/posts/1')
        self.assertEqual(post.text, 'hello world')
        self.assertEqual(post.photo, 'blob/posts/1')
        self.assertEqual(post.author, self.author)

    def test_create_post_text_validation(self):
        with self.assertRaises(ValidationError):
            create_post(self.author, '')
        with self.assertRaises(ValidationError):
            create_post(self.author, ' \n\t ')
        with self.assertRaises(ValidationError):
            create_post(self.author, 'x' * 1001)

    def test_distinct_ids(self):
        ids = {create_post(self.author, f'post {i}').id for i in range(10)}
        self.assertEqual(len(ids), 10)

    def test_only_author_deletes(self):
        post = make_post(self.author)

        with self.assertRaises(Forbidden):
            delete_post(self.other, post.id)
        self.assertTrue(Post.objects.filter(id=post.id).exists())

        delete_post(self.author, post.id)
        self.assertFalse(Post.objects.filter(id=post.id).exists())

    def test_delete_missing_post(self):
        with self.assertRaises(NotFound):
            delete_post(self.author, 999999)
