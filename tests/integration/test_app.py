"""
Integration tests for health, metrics, error rendering and CLI commands.
"""

from procurement.cli_commands import DEFAULT_GL_ACCOUNTS
from procurement.database import get_session
from procurement.models import GLAccount


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json()['database'] == 'connected'


def test_metrics_count_record_changes(client):
    client.post('/gl-accounts', json={'account_code': '1000', 'account_name': 'Cash'})

    response = client.get('/metrics')
    text = response.get_data(as_text=True)

    assert response.status_code == 200
    assert 'procurement_record_changes_total{entity="gl_account",action="create"}' in text
    assert 'http_requests_total' in text
    assert 'http_request_duration_seconds_bucket' in text


def test_unknown_route_is_json_404(client):
    response = client.get('/nowhere')

    assert response.status_code == 404
    assert response.get_json()['status'] == 'error'


def test_wrong_method_is_json_405(client):
    response = client.put('/gl-accounts')

    assert response.status_code == 405
    assert response.get_json()['status'] == 'error'


class TestCLICommands:

    def test_init_db(self, runner):
        result = runner.invoke(args=['init-db'])

        assert result.exit_code == 0
        assert 'Database tables created.' in result.output

    def test_seed_is_idempotent(self, runner):
        first = runner.invoke(args=['seed-gl-accounts'])
        second = runner.invoke(args=['seed-gl-accounts'])

        assert first.exit_code == 0
        assert f'{len(DEFAULT_GL_ACCOUNTS)} GL account(s) created' in first.output
        assert '0 GL account(s) created' in second.output
        assert get_session().query(GLAccount).count() == len(DEFAULT_GL_ACCOUNTS)

    def test_seed_keeps_existing_codes(self, runner, session):
        session.add(GLAccount(account_code='1000', account_name='Main Cash'))
        session.commit()

        result = runner.invoke(args=['seed-gl-accounts'])

        assert result.exit_code == 0
        assert '1 already present, skipped' in result.output
        cash = get_session().query(GLAccount).filter_by(account_code='1000').one()
        assert cash.account_name == 'Main Cash'

    def test_seed_reset(self, runner, client, po_payload):
        runner.invoke(args=['seed-gl-accounts'])
        cash = get_session().query(GLAccount).filter_by(account_code='1000').one()
        client.post('/purchase-orders', json=po_payload(cash.id))

        result = runner.invoke(args=['seed-gl-accounts', '--reset'], input='y\n')

        assert result.exit_code == 0
        assert f'{len(DEFAULT_GL_ACCOUNTS)} GL account(s) created' in result.output
        assert client.get('/purchase-orders').get_json()['total'] == 0
