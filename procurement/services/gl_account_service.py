"""GL account service: CRUD with uniqueness and usage guards."""
import logging
from typing import Dict, List

from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from procurement.exceptions import ConflictError, NotFoundError
from procurement.models import GLAccount, PurchaseOrderLineItem
from procurement.schemas import GLAccountCreate, GLAccountUpdate, GLAccountQuery
from procurement.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    'account_code': GLAccount.account_code,
    'account_name': GLAccount.account_name,
    'created_at': GLAccount.created_at,
}


def _duplicate_code_error(account_code: str) -> ConflictError:
    return ConflictError(
        f'Account with code {account_code} already exists',
        payload={'account_code': account_code}
    )


def _is_account_code_violation(error: IntegrityError) -> bool:
    error_msg = str(error.orig).lower()
    return 'unique' in error_msg and 'account_code' in error_msg


def _commit(session: Session, account_code: str) -> None:
    """Commit or roll back, mapping a unique-constraint race on account_code to ConflictError."""
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if _is_account_code_violation(e):
            logger.info(f"Account code {account_code} lost a concurrent insert race")
            raise _duplicate_code_error(account_code)
        raise
    except Exception:
        session.rollback()
        raise


def count_line_item_usage(session: Session, account_id: str) -> int:
    """Number of line items that reference the account."""
    return session.query(func.count(PurchaseOrderLineItem.id)).filter(
        PurchaseOrderLineItem.gl_account_id == account_id
    ).scalar() or 0


def _ensure_code_available(session: Session, account_code: str, exclude_id: str = None) -> None:
    q = session.query(GLAccount.id).filter(GLAccount.account_code == account_code)
    if exclude_id:
        q = q.filter(GLAccount.id != exclude_id)
    if q.first():
        raise _duplicate_code_error(account_code)


def create_gl_account(session: Session, data: GLAccountCreate) -> GLAccount:
    """
    Create a GL account.

    Raises:
        ConflictError: if the account code is already taken (pre-check or
            unique constraint at commit time).
    """
    _ensure_code_available(session, data.account_code)

    account = GLAccount(
        account_code=data.account_code,
        account_name=data.account_name,
        description=data.description
    )
    session.add(account)
    _commit(session, data.account_code)

    logger.info(f"GL account {account.account_code} created ({account.id})")
    return account


def list_gl_accounts(session: Session, query: GLAccountQuery) -> Page:
    """
    Search, sort and paginate GL accounts.

    Search is a case-insensitive substring match on code or name. Each
    returned row is a (GLAccount, line_item_count) pair.
    """
    usage = (
        session.query(
            PurchaseOrderLineItem.gl_account_id.label('gl_account_id'),
            func.count(PurchaseOrderLineItem.id).label('line_item_count')
        )
        .group_by(PurchaseOrderLineItem.gl_account_id)
        .subquery()
    )

    q = session.query(
        GLAccount,
        func.coalesce(usage.c.line_item_count, 0)
    ).outerjoin(usage, usage.c.gl_account_id == GLAccount.id)

    if query.search:
        term = query.search.lower()
        q = q.filter(or_(
            func.lower(GLAccount.account_code).contains(term, autoescape=True),
            func.lower(GLAccount.account_name).contains(term, autoescape=True)
        ))

    column = SORT_COLUMNS[query.sort_by]
    primary = column.desc() if query.sort_order == 'desc' else column.asc()
    q = q.order_by(primary, GLAccount.id.asc())

    return paginate(q, query.page, query.limit)


def get_gl_account(session: Session, account_id: str) -> GLAccount:
    account = session.query(GLAccount).filter(GLAccount.id == account_id).first()
    if not account:
        raise NotFoundError(f'GL Account with ID {account_id} not found')
    return account


def get_gl_account_by_code(session: Session, account_code: str) -> GLAccount:
    account = session.query(GLAccount).filter(GLAccount.account_code == account_code).first()
    if not account:
        raise NotFoundError(f'GL Account with code {account_code} not found')
    return account


def update_gl_account(session: Session, account_id: str, changes: GLAccountUpdate) -> GLAccount:
    """
    Apply only the fields present in the request.

    Raises:
        NotFoundError: unknown id.
        ConflictError: the new account code belongs to another account.
    """
    account = get_gl_account(session, account_id)
    values = changes.changes()

    new_code = values.get('account_code')
    if new_code and new_code != account.account_code:
        _ensure_code_available(session, new_code, exclude_id=account.id)

    for name, value in values.items():
        setattr(account, name, value)

    _commit(session, account.account_code)
    return account


def delete_gl_account(session: Session, account_id: str) -> None:
    """
    Delete an account that no line item references.

    Raises:
        NotFoundError: unknown id.
        ConflictError: the account is still used by line items.
    """
    account = get_gl_account(session, account_id)

    usage = count_line_item_usage(session, account.id)
    if usage > 0:
        raise ConflictError(
            f'Cannot delete GL Account. It is being used in {usage} line item(s)',
            payload={'line_item_count': usage}
        )

    try:
        session.delete(account)
        session.commit()
    except IntegrityError:
        # A line item was attached after the usage check; the FK is the backstop
        session.rollback()
        raise ConflictError('Cannot delete GL Account. It is being used in line items')

    logger.info(f"GL account {account_id} deleted")


def get_all_accounts(session: Session) -> List[Dict[str, str]]:
    """Lightweight projection of every account ordered by code (dropdown feed)."""
    rows = session.query(
        GLAccount.id, GLAccount.account_code, GLAccount.account_name, GLAccount.description
    ).order_by(GLAccount.account_code.asc()).all()

    return [
        {
            'id': row.id,
            'account_code': row.account_code,
            'account_name': row.account_name,
            'description': row.description,
        }
        for row in rows
    ]
