from unittest.mock import MagicMock

import redis


def test_signup_then_duplicate_rejected(client):
    body = {'email': 'bob@example.com', 'password': 'pw'}
    assert client.post('/users/signup', json=body).status_code == 201
    res = client.post('/users/signup', json={'email': 'bob@example.com', 'password': 'other'})
    assert res.status_code == 400
    assert res.get_json()['message'] == 'User already exists'
    # duplicate must not overwrite the first password
    assert client.post('/users/login', json=body).status_code == 200


def test_signup_malformed_body(client):
    res = client.post('/users/signup', data='{not json', content_type='application/json')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_body'
    assert client.post('/users/signup', json=['a', 'b']).status_code == 400
    assert client.post('/users/signup', json={'email': 42, 'password': 'x'}).status_code == 400


def test_login_outcomes(client, signed_up):
    ok = client.post('/users/login', json={'email': signed_up, 'password': 'hunter2'})
    assert ok.status_code == 200
    assert ok.get_json() == {'message': 'Login successful'}

    wrong = client.post('/users/login', json={'email': signed_up, 'password': 'nope'})
    assert wrong.status_code == 401
    assert wrong.get_json()['message'] == 'Incorrect password'

    missing = client.post('/users/login', json={'email': 'ghost@example.com', 'password': 'x'})
    assert missing.status_code == 404


def test_login_malformed_body(client):
    assert client.post('/users/login', data='nope').status_code == 400


def test_list_users_reflects_signups_only(client):
    assert client.get('/users').get_json() == []
    client.post('/users/signup', json={'email': 'a@x.io', 'password': '1'})
    client.post('/users/signup', json={'email': 'b@x.io', 'password': '2'})
    client.post('/users/signup', json={'email': 'a@x.io', 'password': 'dup'})
    client.post('/users/score', json={'email': 'b@x.io', 'score': 4})

    res = client.get('/users')
    assert res.status_code == 200
    users = {u['email']: u for u in res.get_json()}
    assert set(users) == {'a@x.io', 'b@x.io'}
    assert users['a@x.io'] == {'email': 'a@x.io', 'password': '1', 'score': 0}
    assert users['b@x.io']['score'] == 4


def test_update_score_accumulates(client, signed_up):
    res = client.post('/users/score', json={'email': signed_up, 'score': 5})
    assert res.status_code == 200
    assert res.get_json()['score'] == 5
    client.post('/users/score', json={'email': signed_up, 'score': 3})

    res = client.get('/users/highest', json={'email': signed_up})
    assert res.status_code == 200
    assert res.get_json() == {'score': 8}


def test_update_score_negative_delta(client, signed_up):
    client.post('/users/score', json={'email': signed_up, 'score': 2})
    res = client.post('/users/score', json={'email': signed_up, 'score': -7})
    assert res.get_json()['score'] == -5


def test_update_score_unknown_user(client):
    res = client.post('/users/score', json={'email': 'ghost@example.com', 'score': 1})
    assert res.status_code == 404
    assert res.get_json()['error'] == 'user_not_found'


def test_update_score_rejects_non_integer(client, signed_up):
    assert client.post('/users/score', json={'email': signed_up, 'score': 'ten'}).status_code == 400
    assert client.post('/users/score', json={'email': signed_up, 'score': 1.5}).status_code == 400
    assert client.post('/users/score', json={'email': signed_up, 'score': True}).status_code == 400


def test_update_score_rejects_delta_outside_64_bits(client, signed_up):
    res = client.post('/users/score', json={'email': signed_up, 'score': 2**70})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_body'
    assert client.post('/users/score', json={'email': signed_up, 'score': 2**63}).status_code == 400
    assert client.post('/users/score', json={'email': signed_up, 'score': -2**63}).status_code == 200


def test_get_score_unknown_email_is_zero(client):
    res = client.get('/users/highest', json={'email': 'never@example.com'})
    assert res.status_code == 200
    assert res.get_json() == {'score': 0}


def test_get_score_query_string_fallback(client, signed_up):
    client.post('/users/score', json={'email': signed_up, 'score': 9})
    res = client.get('/users/highest', query_string={'email': signed_up})
    assert res.get_json() == {'score': 9}


def test_get_score_query_string_with_json_content_type_and_no_body(client, signed_up):
    client.post('/users/score', json={'email': signed_up, 'score': 4})
    res = client.get('/users/highest', query_string={'email': signed_up},
                     content_type='application/json')
    assert res.status_code == 200
    assert res.get_json() == {'score': 4}


def test_get_score_without_email_is_bad_request(client):
    assert client.get('/users/highest').status_code == 400
    assert client.get('/users/highest', data='garbage').status_code == 400


def test_store_failure_returns_500(flask_app, client):
    broken = MagicMock()
    broken.hgetall.side_effect = redis.ConnectionError("connection refused")
    flask_app.extensions['user_store'].client = broken

    res = client.get('/users')
    assert res.status_code == 500
    body = res.get_json()
    assert body == {'error': 'store_error', 'message': 'Error retrieving user data'}
    assert 'refused' not in res.get_data(as_text=True)


def test_cors_preflight_allows_frontend_origin(client):
    res = client.options('/users/signup', headers={
        'Origin': 'http://localhost:5173',
        'Access-Control-Request-Method': 'POST',
        'Access-Control-Request-Headers': 'Content-Type',
    })
    assert res.status_code == 200
    assert res.headers['Access-Control-Allow-Origin'] == 'http://localhost:5173'
    assert 'POST' in res.headers['Access-Control-Allow-Methods']


def test_cors_ignores_other_origins(client):
    res = client.post('/users/signup', json={'email': 'c@x.io', 'password': 'p'},
                      headers={'Origin': 'http://evil.example'})
    assert res.status_code == 201
    assert 'Access-Control-Allow-Origin' not in res.headers
