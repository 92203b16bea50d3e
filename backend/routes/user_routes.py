"""User account & score HTTP API routes.

Endpoints
---------
POST   /users/signup    -> signup        {email, password}   201 | 400 exists
GET    /users           -> list_users                        200 [{email, password, score}]
POST   /users/login     -> login         {email, password}   200 | 404 | 401
POST   /users/score     -> update_score  {email, score}      200 {message, score} | 404
GET    /users/highest   -> get_score     {email} (body or ?email=)  200 {score}

Error shape
-----------
    { "error": <code>, "message": <short human text> }

Store failures raise ``StoreError`` and are turned into 500 responses by the
application-level handler registered in ``app.create_app``.

Notes
-----
* Passwords are stored and compared in plaintext; no token/session is issued.
* ``/users/highest`` returns one user's score, not a maximum across users.
* Body validation is limited to "is a JSON object" plus field types.
"""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from util.route_builder import RouteBuilder
from util.store import UserExistsError, UserNotFoundError, UserStore

bp = Blueprint('users', __name__)
__all__ = ["bp"]


class InvalidBody(ValueError):
    pass


def _store() -> UserStore:
    return current_app.extensions['user_store']


def _error(code: str, message: str, status: int):
    return jsonify({'error': code, 'message': message}), status


def _invalid_body():
    return _error('invalid_body', 'Invalid request body', 400)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        current_app.logger.info("Error decoding request body on %s", request.path)
        raise InvalidBody()
    return data


def _str_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key, '')
    if not isinstance(value, str):
        raise InvalidBody(key)
    return value


def _int_field(data: Dict[str, Any], key: str) -> int:
    value = data.get(key, 0)
    # bool is an int subclass but not a valid delta
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidBody(key)
    # Redis integers are signed 64-bit
    if not -2**63 <= value < 2**63:
        raise InvalidBody(key)
    return value


# ---------------------------------------------------------------------------
# Route Handlers
# ---------------------------------------------------------------------------


def signup():
    """Register a new account.

    JSON: { "email": str, "password": str }
    201 on success, 400 if the email is already registered.
    """
    try:
        data = _json_body()
        email = _str_field(data, 'email')
        password = _str_field(data, 'password')
    except InvalidBody:
        return _invalid_body()
    try:
        _store().create_user(email, password)
    except UserExistsError:
        return _error('user_exists', 'User already exists', 400)
    return jsonify({'message': 'User signed up successfully'}), 201


def list_users():
    """Return every account (passwords included, unredacted)."""
    users = _store().list_users()
    return jsonify([u.to_dict() for u in users]), 200


def login():
    """Plaintext credential check.

    JSON: { "email": str, "password": str }
    200 match, 401 mismatch, 404 unknown email.
    """
    try:
        data = _json_body()
        email = _str_field(data, 'email')
        password = _str_field(data, 'password')
    except InvalidBody:
        return _invalid_body()
    try:
        stored = _store().get_password(email)
    except UserNotFoundError:
        return _error('user_not_found', 'User not found', 404)
    if password != stored:
        return _error('incorrect_password', 'Incorrect password', 401)
    return jsonify({'message': 'Login successful'}), 200


def update_score():
    """Add a signed delta to a registered user's score.

    JSON: { "email": str, "score": int }
    404 if the email was never signed up.
    """
    try:
        data = _json_body()
        email = _str_field(data, 'email')
        delta = _int_field(data, 'score')
    except InvalidBody:
        return _invalid_body()
    try:
        score = _store().add_score(email, delta)
    except UserNotFoundError:
        return _error('user_not_found', 'User not found', 404)
    return jsonify({'message': 'User score updated successfully', 'score': score}), 200


def get_score():
    """Single user's score; 0 if never scored.

    Email comes from the JSON body of the GET, or from ``?email=`` when no
    body is sent (browsers cannot attach a body to fetch GETs).
    """
    try:
        if request.content_length:
            email = _str_field(_json_body(), 'email')
        elif 'email' in request.args:
            email = request.args['email']
        else:
            raise InvalidBody('email')
    except InvalidBody:
        return _invalid_body()
    return jsonify({'score': _store().get_score(email)}), 200


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


RouteBuilder(bp) \
    .route('/users/signup') \
    .methods('POST') \
    .handler(signup) \
    .build()

RouteBuilder(bp) \
    .route('/users') \
    .methods('GET') \
    .handler(list_users) \
    .build()

RouteBuilder(bp) \
    .route('/users/login') \
    .methods('POST') \
    .handler(login) \
    .build()

RouteBuilder(bp) \
    .route('/users/score') \
    .methods('POST') \
    .handler(update_score) \
    .build()

RouteBuilder(bp) \
    .route('/users/highest') \
    .methods('GET') \
    .handler(get_score) \
    .build()
