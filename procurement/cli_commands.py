"""
Flask CLI commands for database management.

Commands:
- flask init-db: Create every table from the models
- flask seed-gl-accounts: Load the standard chart of accounts
"""

import click
from procurement.database import create_all, get_session
from procurement.models import GLAccount, PurchaseOrder, PurchaseOrderLineItem

# (code, name, description)
DEFAULT_GL_ACCOUNTS = (
    # Asset accounts
    ('1000', 'Cash', 'Cash and cash equivalents'),
    ('1100', 'Accounts Receivable', 'Money owed by customers'),
    ('1200', 'Inventory', 'Raw materials, work in progress, and finished goods'),
    ('1300', 'Prepaid Expenses', 'Expenses paid in advance'),
    ('1400', 'Fixed Assets', 'Property, plant, and equipment'),
    ('1500', 'Accumulated Depreciation', 'Accumulated depreciation on fixed assets'),
    # Liability accounts
    ('2000', 'Accounts Payable', 'Money owed to suppliers'),
    ('2100', 'Accrued Expenses', 'Expenses incurred but not yet paid'),
    ('2200', 'Notes Payable', 'Short-term and long-term loans'),
    ('2300', 'Taxes Payable', 'Taxes owed to government'),
    # Equity accounts
    ('3000', 'Owner Equity', 'Owner investment in the business'),
    ('3100', 'Retained Earnings', 'Accumulated profits'),
    ('3200', 'Common Stock', 'Common stock issued'),
    # Revenue accounts
    ('4000', 'Sales Revenue', 'Revenue from product sales'),
    ('4100', 'Service Revenue', 'Revenue from services'),
    ('4200', 'Interest Income', 'Interest earned on investments'),
    ('4300', 'Other Revenue', 'Other miscellaneous revenue'),
    # Expense accounts
    ('5000', 'Cost of Goods Sold', 'Direct costs of producing goods'),
    ('5100', 'Office Supplies', 'Office supplies and materials'),
    ('5200', 'Rent Expense', 'Rent for office and warehouse space'),
    ('5300', 'Utilities', 'Electricity, water, gas, and internet'),
    ('5400', 'Salaries and Wages', 'Employee compensation'),
    ('5500', 'Insurance', 'Business insurance premiums'),
    ('5600', 'Depreciation Expense', 'Depreciation on fixed assets'),
    ('5700', 'Advertising', 'Marketing and advertising expenses'),
    ('5800', 'Travel and Entertainment', 'Business travel and entertainment expenses'),
    ('5900', 'Professional Services', 'Legal, accounting, and consulting fees'),
)


def seed_gl_accounts(session, reset=False):
    """
    Insert the default accounts whose code is not present yet.

    With reset=True every line item, purchase order and account is removed
    first. Returns the number of accounts created.
    """
    if reset:
        session.query(PurchaseOrderLineItem).delete(synchronize_session=False)
        session.query(PurchaseOrder).delete(synchronize_session=False)
        session.query(GLAccount).delete(synchronize_session=False)

    existing = {row.account_code for row in session.query(GLAccount.account_code).all()}

    created = 0
    for code, name, description in DEFAULT_GL_ACCOUNTS:
        if code in existing:
            continue
        session.add(GLAccount(account_code=code, account_name=name, description=description))
        created += 1

    session.commit()
    return created


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create the database tables."""
        create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('seed-gl-accounts')
    @click.option('--reset', is_flag=True, default=False,
                  help='Delete every purchase order and GL account before seeding')
    def seed_gl_accounts_command(reset):
        """Load the standard chart of GL accounts."""
        if reset:
            click.confirm('This deletes every purchase order and GL account. Continue?', abort=True)

        session = get_session()
        try:
            created = seed_gl_accounts(session, reset=reset)
        except Exception as e:
            session.rollback()
            click.echo(click.style(f'Error seeding GL accounts: {e}', fg='red'))
            raise SystemExit(1)

        skipped = len(DEFAULT_GL_ACCOUNTS) - created
        click.echo(click.style(f'{created} GL account(s) created', fg='green', bold=True))
        if skipped:
            click.echo(f'{skipped} already present, skipped')
