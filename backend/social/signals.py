"""
Django Signals for maintaining the denormalized comment counter.

like_count is maintained in services.py with QuerySet.update(F(...)),
which does not fire signals. comment_count follows the Comment row
lifecycle instead, so it stays right whether a comment is removed by
remove_comment(), the admin, or a cascade.

IMPORTANT: Signals do NOT fire on:
- bulk_create()
- QuerySet.delete() without collected instances
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.db.models import F

from .models import Comment, Post


@receiver(post_save, sender=Comment)
def increment_comment_count(sender, instance, created, **kwargs):
    """When a new comment is created, increment the post's comment count."""
    if created:
        Post.objects.filter(id=instance.post_id).update(
            comment_count=F('comment_count') + 1
        )


@receiver(post_delete, sender=Comment)
def decrement_comment_count(sender, instance, **kwargs):
    """
    When a comment is deleted, decrement the post's comment count.

    On post deletion this fires for each cascaded comment against a row
    that is about to disappear; the UPDATE then matches nothing.
    """
    Post.objects.filter(id=instance.post_id, comment_count__gt=0).update(
        comment_count=F('comment_count') - 1
    )
