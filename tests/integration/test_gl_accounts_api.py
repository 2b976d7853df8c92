"""
Integration tests for the /gl-accounts JSON endpoints.
"""

import pytest


@pytest.fixture
def account(client):
    """Create account 1000 through the API and return its JSON."""
    response = client.post('/gl-accounts', json={
        'account_code': '1000', 'account_name': 'Cash and Equivalents', 'description': 'Cash on hand'
    })
    assert response.status_code == 201
    return response.get_json()


def _create_order_using(client, account_id, po_number='PO-1'):
    response = client.post('/purchase-orders', json={
        'vendor_name': 'Acme',
        'po_number': po_number,
        'ap_account': '2000',
        'transaction_type': 'Services',
        'line_items': [{'item_name': 'Audit', 'quantity': 1, 'unit_price': 500, 'gl_account_id': account_id}],
    })
    assert response.status_code == 201
    return response.get_json()


class TestCreateEndpoint:

    def test_create_returns_201(self, account):
        assert account['account_code'] == '1000'
        assert account['account_name'] == 'Cash and Equivalents'
        assert len(account['id']) == 36
        assert account['created_at'] is not None

    def test_duplicate_code_returns_409(self, client, account):
        response = client.post('/gl-accounts', json={'account_code': '1000', 'account_name': 'Other'})

        assert response.status_code == 409
        body = response.get_json()
        assert body['status'] == 'error'
        assert body['message'] == 'Account with code 1000 already exists'

    def test_missing_name_returns_400(self, client):
        response = client.post('/gl-accounts', json={'account_code': '1000'})

        assert response.status_code == 400
        assert response.get_json()['message'] == 'account_name is required'

    def test_code_too_long_returns_400(self, client):
        response = client.post('/gl-accounts', json={'account_code': '1' * 21, 'account_name': 'Too long'})
        assert response.status_code == 400

    def test_unknown_field_returns_400(self, client):
        response = client.post('/gl-accounts', json={
            'account_code': '1000', 'account_name': 'Cash', 'accountCode': '1000'
        })

        assert response.status_code == 400
        assert response.get_json()['fields'] == ['accountCode']

    def test_non_json_body_returns_400(self, client):
        response = client.post('/gl-accounts', data='not json', content_type='text/plain')
        assert response.status_code == 400


class TestReadEndpoints:

    def test_get_by_id_includes_usage(self, client, account):
        _create_order_using(client, account['id'])

        response = client.get(f"/gl-accounts/{account['id']}")

        assert response.status_code == 200
        assert response.get_json()['line_item_count'] == 1

    def test_get_by_code(self, client, account):
        response = client.get('/gl-accounts/code/1000')

        assert response.status_code == 200
        assert response.get_json()['id'] == account['id']

    def test_unknown_id_returns_404(self, client):
        response = client.get('/gl-accounts/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['message'] == 'GL Account with ID does-not-exist not found'

    def test_all_accounts(self, client, account):
        client.post('/gl-accounts', json={'account_code': '0500', 'account_name': 'Petty Cash'})

        response = client.get('/gl-accounts/all')

        assert response.status_code == 200
        assert [a['account_code'] for a in response.get_json()] == ['0500', '1000']

    def test_list_search_and_envelope(self, client, account):
        client.post('/gl-accounts', json={'account_code': '2000', 'account_name': 'Accounts Payable'})

        response = client.get('/gl-accounts?search=CASH')
        body = response.get_json()

        assert response.status_code == 200
        assert body['total'] == 1
        assert body['page'] == 1
        assert body['limit'] == 10
        assert body['total_pages'] == 1
        assert body['data'][0]['account_name'] == 'Cash and Equivalents'
        assert body['data'][0]['line_item_count'] == 0

    def test_list_pagination(self, client):
        for i in range(25):
            client.post('/gl-accounts', json={'account_code': f'{6000 + i}', 'account_name': f'Expense {i}'})

        body = client.get('/gl-accounts?page=2&limit=10').get_json()

        assert len(body['data']) == 10
        assert body['total'] == 25
        assert body['total_pages'] == 3

    @pytest.mark.parametrize('query', [
        'page=0', 'limit=101', 'limit=abc', 'sort_by=password', 'sort_order=up'
    ])
    def test_invalid_list_params_return_400(self, client, query):
        assert client.get(f'/gl-accounts?{query}').status_code == 400


class TestUpdateAndDeleteEndpoints:

    def test_patch_partial(self, client, account):
        response = client.patch(f"/gl-accounts/{account['id']}", json={'account_name': 'Cash'})
        body = response.get_json()

        assert response.status_code == 200
        assert body['account_name'] == 'Cash'
        assert body['description'] == 'Cash on hand'

    def test_patch_to_taken_code_returns_409(self, client, account):
        other = client.post('/gl-accounts', json={'account_code': '2000', 'account_name': 'AP'}).get_json()

        response = client.patch(f"/gl-accounts/{other['id']}", json={'account_code': '1000'})
        assert response.status_code == 409

    def test_delete_unused_returns_204(self, client, account):
        response = client.delete(f"/gl-accounts/{account['id']}")

        assert response.status_code == 204
        assert client.get(f"/gl-accounts/{account['id']}").status_code == 404

    def test_delete_used_returns_409(self, client, account):
        _create_order_using(client, account['id'])

        response = client.delete(f"/gl-accounts/{account['id']}")

        assert response.status_code == 409
        assert response.get_json()['message'] == 'Cannot delete GL Account. It is being used in 1 line item(s)'
        assert client.get(f"/gl-accounts/{account['id']}").status_code == 200

    def test_delete_unknown_returns_404(self, client):
        assert client.delete('/gl-accounts/nope').status_code == 404
