import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from flashcards.auth.password import hash_password
from flashcards.database import get_db
from flashcards.main import app
from flashcards.models.user import Role
from flashcards.stores import user_store


@pytest.fixture
def client(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client, db):
    user_store.insert(
        db,
        name='Admin User',
        email='admin@example.com',
        hashed_password=hash_password('admin-pass'),
        role=Role.admin,
    )
    response = client.post(
        '/api/auth/login',
        json={'email': 'admin@example.com', 'password': 'admin-pass', 'userType': 'admin'},
    )
    return {'Authorization': f"Bearer {response.json()['token']}"}


def _register(client, email='student@example.com', password='hunter22'):
    return client.post('/api/auth/register', json={'name': 'Student', 'email': email, 'password': password})


def test_root_reports_running(client) -> None:
    assert client.get('/').json() == {'status': 'Flashcard Quiz API running'}


def test_register_then_login_and_fetch_profile(client) -> None:
    registered = _register(client)
    assert registered.status_code == 201
    assert registered.json()['user']['role'] == 'client'

    logged_in = client.post('/api/auth/login', json={'email': 'student@example.com', 'password': 'hunter22'})
    assert logged_in.status_code == 200

    profile = client.get('/api/auth/me', headers={'Authorization': f"Bearer {logged_in.json()['token']}"})
    assert profile.status_code == 200
    assert profile.json() == {
        'id': registered.json()['user']['id'],
        'name': 'Student',
        'email': 'student@example.com',
        'role': 'client',
    }


def test_register_with_missing_fields_returns_400(client) -> None:
    response = client.post('/api/auth/register', json={'email': 'student@example.com'})

    assert response.status_code == 400


def test_register_duplicate_email_returns_400(client) -> None:
    _register(client)

    response = _register(client)

    assert response.status_code == 400
    assert response.json() == {'detail': 'User already exists.'}


@pytest.mark.parametrize(
    'body',
    [
        {'email': 'student@example.com', 'password': 'wrong'},
        {'email': 'nobody@example.com', 'password': 'hunter22'},
        {'email': 'student@example.com', 'password': 'hunter22', 'userType': 'admin'},
    ],
)
def test_login_failures_share_status_and_message(client, body: dict) -> None:
    _register(client)

    response = client.post('/api/auth/login', json=body)

    assert response.status_code == 401
    assert response.json() == {'detail': 'Invalid credentials.'}


def test_protected_route_without_token_returns_401(client) -> None:
    response = client.post('/api/decks', json={'name': 'Python', 'category': 'Programming'})

    assert response.status_code == 401
    assert response.json() == {'detail': 'Missing token.'}


def test_protected_route_with_bad_token_returns_403(client) -> None:
    response = client.post(
        '/api/decks',
        json={'name': 'Python', 'category': 'Programming'},
        headers={'Authorization': 'Bearer not-a-token'},
    )

    assert response.status_code == 403
    assert response.json() == {'detail': 'Invalid token.'}


def test_client_token_cannot_create_decks(client) -> None:
    token = _register(client).json()['token']

    response = client.post(
        '/api/decks',
        json={'name': 'Python', 'category': 'Programming'},
        headers={'Authorization': f'Bearer {token}'},
    )

    assert response.status_code == 403


def test_admin_builds_deck_and_student_takes_quiz(client, admin_headers) -> None:
    created = client.post('/api/decks', json={'name': 'Python', 'category': 'Programming'}, headers=admin_headers)
    assert created.status_code == 201
    deck_id = created.json()['deckId']

    card = client.post(
        f'/api/cards/deck/{deck_id}',
        json={
            'question': 'Which keyword defines a function?',
            'option_a': 'func',
            'option_b': 'def',
            'option_c': 'lambda',
            'option_d': 'fn',
            'correct_answer': 'b',
            'explanation': 'Functions are defined with def.',
        },
        headers=admin_headers,
    )
    assert card.status_code == 201
    card_id = card.json()['cardId']

    started = client.post('/api/quiz/start', json={'deck_id': deck_id})
    assert started.status_code == 200
    assert started.json()['first_card']['id'] == card_id
    session_id = started.json()['session_id']

    answered = client.post(
        '/api/quiz/answer',
        json={'session_id': session_id, 'card_id': card_id, 'selected_answer': 'c'},
    )
    assert answered.json()['is_correct'] is False
    assert answered.json()['correct_answer'] == 'b'
    assert answered.json()['state'] == 'summarized'

    submitted = client.post('/api/quiz/submit', json={'session_id': session_id})
    assert submitted.status_code == 200
    assert submitted.json() == {'message': 'Score saved successfully', 'score': 0, 'total_questions': 1}

    resubmitted = client.post('/api/quiz/submit', json={'session_id': session_id})
    assert resubmitted.status_code == 409


def test_invalid_answer_key_returns_400(client) -> None:
    response = client.post('/api/quiz/answer', json={'card_id': 1, 'selected_answer': 'B'})

    assert response.status_code == 400


def test_quiz_start_on_empty_deck_returns_404(client, admin_headers) -> None:
    deck_id = client.post(
        '/api/decks',
        json={'name': 'Empty', 'category': 'Nothing'},
        headers=admin_headers,
    ).json()['deckId']

    response = client.post('/api/quiz/start', json={'deck_id': deck_id})

    assert response.status_code == 404
    assert 'first_card' not in response.json()


def test_owned_quiz_session_is_private(client, admin_headers) -> None:
    deck_id = client.post('/api/decks', json={'name': 'Owned', 'category': 'Misc'}, headers=admin_headers).json()['deckId']
    card_id = client.post(
        f'/api/cards/deck/{deck_id}',
        json={
            'question': 'Pick a',
            'option_a': 'a',
            'option_b': 'b',
            'option_c': 'c',
            'option_d': 'd',
            'correct_answer': 'a',
        },
        headers=admin_headers,
    ).json()['cardId']
    owner = {'Authorization': f"Bearer {_register(client).json()['token']}"}
    other = {'Authorization': f"Bearer {_register(client, email='other@example.com').json()['token']}"}

    session_id = client.post('/api/quiz/start', json={'deck_id': deck_id}, headers=owner).json()['session_id']
    client.post(
        '/api/quiz/answer',
        json={'session_id': session_id, 'card_id': card_id, 'selected_answer': 'a'},
        headers=owner,
    )

    assert client.post('/api/quiz/submit', json={'session_id': session_id}, headers=other).status_code == 403
    assert client.post('/api/quiz/submit', json={'session_id': session_id}).status_code == 401
    assert client.get(f'/api/quiz/sessions/{session_id}', headers=other).status_code == 403

    submitted = client.post('/api/quiz/submit', json={'session_id': session_id}, headers=owner)
    assert submitted.status_code == 200
    assert submitted.json()['score'] == 1
