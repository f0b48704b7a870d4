import threading
from datetime import timedelta

import pytest

from univote.database.models import Vote
from univote.elections.status import ACTIVE, UPCOMING
from univote.extensions import db


def test_vote_then_duplicate_then_results(client, seed, voter_headers):
    election_id = seed.election(start=timedelta(hours=-1), end=timedelta(hours=1))
    coalition_a = seed.coalition(election_id, name="A")
    coalition_b = seed.coalition(election_id, name="B")

    first = client.post('/api/votes', json={'electionId': election_id, 'coalitionId': coalition_a},
                        headers=voter_headers)
    assert first.status_code == 201
    assert first.get_json()['success'] is True

    second = client.post('/api/votes', json={'electionId': election_id, 'coalitionId': coalition_b},
                         headers=voter_headers)
    assert second.status_code == 400
    assert second.get_json() == {'success': False, 'message': 'You have already voted in this election'}

    results = client.get(f'/api/results/{election_id}', headers=voter_headers).get_json()
    assert results['success'] is True
    assert results['totalVotes'] == 1
    counts = {r['id']: r['voteCount'] for r in results['results']}
    assert counts == {coalition_a: 1, coalition_b: 0}
    assert results['election']['status'] == ACTIVE


def test_vote_on_stale_active_election_past_end(client, seed, voter_headers):
    election_id = seed.election(start=timedelta(hours=-2), end=timedelta(seconds=-1), status=ACTIVE)
    coalition_id = seed.coalition(election_id)

    resp = client.post('/api/votes', json={'electionId': election_id, 'coalitionId': coalition_id},
                       headers=voter_headers)

    assert resp.status_code == 400
    assert 'ended' in resp.get_json()['message']


def test_vote_on_upcoming_election(client, seed, voter_headers):
    election_id = seed.election(start=timedelta(hours=1), end=timedelta(hours=2))
    coalition_id = seed.coalition(election_id)

    resp = client.post('/api/votes', json={'electionId': election_id, 'coalitionId': coalition_id},
                       headers=voter_headers)

    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'This election is not active'


def test_vote_for_missing_election(client, voter_headers):
    resp = client.post('/api/votes', json={'electionId': 404, 'coalitionId': 1}, headers=voter_headers)

    assert resp.status_code == 404
    assert resp.get_json() == {'success': False, 'message': 'Election not found'}


@pytest.mark.parametrize("payload", [
    {},
    {'electionId': 1},
    {'coalitionId': 1},
    {'electionId': 'abc', 'coalitionId': 1},
    {'electionId': -3, 'coalitionId': 1},
    {'electionId': 10 ** 30, 'coalitionId': 1},
    {'electionId': 1, 'coalitionId': 2 ** 63},
])
def test_vote_payload_validation(client, voter_headers, payload):
    resp = client.post('/api/votes', json=payload, headers=voter_headers)

    assert resp.status_code == 400
    assert resp.get_json()['success'] is False


def test_vote_requires_authentication(client):
    resp = client.post('/api/votes', json={'electionId': 1, 'coalitionId': 1})

    assert resp.status_code == 401
    assert resp.get_json() == {'success': False, 'message': 'No authentication token provided'}


def test_vote_with_garbage_token(client):
    resp = client.post('/api/votes', json={'electionId': 1, 'coalitionId': 1},
                       headers={'Authorization': 'Bearer not-a-jwt'})

    assert resp.status_code == 401
    assert resp.get_json()['message'] == 'Invalid authentication token'


def test_check_vote_status(client, seed, voter_headers):
    election_id = seed.election()
    coalition_id = seed.coalition(election_id)

    before = client.get(f'/api/votes/check/{election_id}', headers=voter_headers).get_json()
    client.post('/api/votes', json={'electionId': election_id, 'coalitionId': coalition_id},
                headers=voter_headers)
    after = client.get(f'/api/votes/check/{election_id}', headers=voter_headers).get_json()

    assert before == {'success': True, 'hasVoted': False}
    assert after == {'success': True, 'hasVoted': True}


def test_string_ids_are_accepted(client, seed, voter_headers):
    election_id = seed.election()
    coalition_id = seed.coalition(election_id)

    resp = client.post('/api/votes', json={'electionId': str(election_id), 'coalitionId': str(coalition_id)},
                       headers=voter_headers)

    assert resp.status_code == 201


def test_vote_attempts_are_rate_limited_per_client(make_app):
    app, seed = make_app(RATELIMIT_ENABLED=True, VOTE_RATE_LIMIT='2 per minute')
    election_id = seed.election()
    coalition_id = seed.coalition(election_id)
    client = app.test_client()
    payload = {'electionId': election_id, 'coalitionId': coalition_id}

    codes = [
        client.post('/api/votes', json=payload, headers=seed.headers(seed.user())).status_code
        for _ in range(3)
    ]

    assert codes[:2] == [201, 201]
    assert codes[2] == 429
    limited = client.post('/api/votes', json=payload, headers=seed.headers(seed.user()))
    assert limited.get_json() == {
        'success': False,
        'message': 'Too many vote attempts. Please wait before voting again.',
    }


def test_results_require_authentication(client, seed):
    election_id = seed.election(status=UPCOMING)

    assert client.get(f'/api/results/{election_id}').status_code == 401


def test_results_list(client, seed, voter_headers):
    active = seed.election()
    seed.election(start=timedelta(hours=3), end=timedelta(hours=4))

    body = client.get('/api/results', headers=voter_headers).get_json()

    assert [e['id'] for e in body['elections']] == [active]
    assert body['elections'][0]['totalVotes'] == 0


def test_concurrent_ballots_from_one_voter_record_exactly_one(make_app, tmp_path):
    app, seed = make_app(SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'ballots.sqlite'}")
    election_id = seed.election()
    coalition_id = seed.coalition(election_id)
    headers = seed.headers(seed.user())
    payload = {'electionId': election_id, 'coalitionId': coalition_id}
    workers = 8
    barrier = threading.Barrier(workers)
    responses = []

    def submit():
        client = app.test_client()
        barrier.wait(timeout=10)
        resp = client.post('/api/votes', json=payload, headers=headers)
        responses.append((resp.status_code, resp.get_json()['message']))

    threads = [threading.Thread(target=submit) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert len(responses) == workers
    assert sorted(code for code, _ in responses) == [201] + [400] * (workers - 1)
    assert {message for code, message in responses if code == 400} == {'You have already voted in this election'}
    with app.app_context():
        assert db.session.query(Vote).filter_by(election_id=election_id).count() == 1
