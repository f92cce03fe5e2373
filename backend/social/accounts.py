"""
Account Service
===============

Registration, profile edits and admin management of accounts.

Accounts are never hard-deleted: deactivation keeps every edge, post,
like and comment pointing at a real row. Django's auth backend refuses
inactive accounts at login.

UNIQUENESS:
-----------
username (case-insensitive) and email are checked up front for a clean
Conflict message. The DB constraints are the real guard - a racing
registration that slips past the check still fails with IntegrityError,
which the exception handler reports as 409.
"""

import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Count, Q
from django.utils import timezone

from .exceptions import Conflict, Forbidden, InvalidOperation, NotFound, ValidationError
from .models import Account
from .queries import Page, paginate, validate_pagination

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('first_name', 'last_name', 'bio', 'avatar')
ADMIN_FIELDS = PROFILE_FIELDS + ('email', 'username', 'role', 'is_active')

RECENT_WINDOW = timedelta(days=7)


def _get_account(account_id: int) -> Account:
    try:
        return Account.objects.get(id=account_id)
    except Account.DoesNotExist:
        raise NotFound('User not found')


def _check_unique(username=None, email=None, exclude_id=None):
    others = Account.objects.all()
    if exclude_id is not None:
        others = others.exclude(id=exclude_id)
    if email and others.filter(email__iexact=email).exists():
        raise Conflict('Email already exists')
    if username and others.filter(username__iexact=username).exists():
        raise Conflict('Username already exists')


def register_account(username: str, email: str, password: str,
                     first_name: str, last_name: str) -> Account:
    _check_unique(username=username, email=email)
    account = Account.objects.create_user(
        username=username,
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
    )
    logger.info("Registered account %s (%s)", account.id, account.username)
    return account


def update_profile(account: Account, **fields) -> Account:
    """Self-service edit. Unknown or None fields are ignored."""
    changed = [name for name in PROFILE_FIELDS if fields.get(name) is not None]
    for name in changed:
        setattr(account, name, fields[name])
    if changed:
        account.save(update_fields=changed + ['updated_at'])
    return account


def change_password(account: Account, current_password: str, new_password: str) -> Account:
    """
    Replace the caller's password.

    The current password must match; the new one goes through
    AUTH_PASSWORD_VALIDATORS before it is hashed.
    """
    if not account.check_password(current_password):
        raise ValidationError('Current password is incorrect')
    try:
        validate_password(new_password, user=account)
    except DjangoValidationError as exc:
        raise ValidationError(exc.messages[0])

    account.set_password(new_password)
    account.save(update_fields=['password', 'updated_at'])
    logger.info("Account %s changed password", account.id)
    return account


def get_account(requester: Account, account_id: int) -> Account:
    """Full profile: visible to its owner and to admins only."""
    account = _get_account(account_id)
    if not requester.is_admin and requester.id != account.id:
        raise Forbidden('Not authorized to view this user')
    return account


def admin_update_account(admin: Account, account_id: int, **fields) -> Account:
    account = _get_account(account_id)
    if account.id == admin.id:
        # same guard as set_active: an admin can't lock themselves out
        if fields.get('is_active') is False:
            raise InvalidOperation('Cannot deactivate your own account')
        if fields.get('role') not in (None, Account.Role.ADMIN):
            raise InvalidOperation('Cannot change your own role')
    _check_unique(
        username=fields.get('username'),
        email=fields.get('email'),
        exclude_id=account.id,
    )
    changed = [name for name in ADMIN_FIELDS if fields.get(name) is not None]
    for name in changed:
        setattr(account, name, fields[name])
    if changed:
        account.save(update_fields=changed + ['updated_at'])
    logger.info("Account %s updated by %s: %s", account.id, admin.id, ', '.join(changed))
    return account


def set_active(admin: Account, account_id: int, active: bool) -> Account:
    account = _get_account(account_id)
    if account.id == admin.id:
        verb = 'activate' if active else 'deactivate'
        raise InvalidOperation(f'Cannot {verb} your own account')

    account.is_active = active
    account.save(update_fields=['is_active', 'updated_at'])
    logger.info("Account %s %s by %s", account.id,
                'activated' if active else 'deactivated', admin.id)
    return account


def list_accounts(page: int = 1, limit: int = 10,
                  search: Optional[str] = None, role: Optional[str] = None) -> Page:
    validate_pagination(page, limit, settings.ACCOUNT_LIST_MAX_PAGE_SIZE)

    queryset = (
        Account.objects
        .annotate(
            following_count=Count('following_edges', distinct=True),
            followers_count=Count('follower_edges', distinct=True),
        )
        .order_by('-created_at', '-id')
    )
    if search:
        queryset = queryset.filter(
            Q(username__icontains=search)
            | Q(email__icontains=search)
            | Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
        )
    if role:
        queryset = queryset.filter(role=role)
    return paginate(queryset, page, limit)


def get_account_stats() -> dict:
    total = Account.objects.count()
    active = Account.objects.filter(is_active=True).count()
    return {
        'total_users': total,
        'active_users': active,
        'inactive_users': total - active,
        'admin_users': Account.objects.filter(role=Account.Role.ADMIN).count(),
        'recent_users': Account.objects.filter(
            created_at__gte=timezone.now() - RECENT_WINDOW
        ).count(),
    }
