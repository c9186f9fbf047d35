"""
Authentication blueprint:
- POST   /login   -> access + refresh token pair for a username
- POST   /token   -> new access token from a refresh token
- DELETE /logout  -> revoke a refresh token

The implementation:
- Access and refresh tokens are JWTs (HS256) signed with distinct secrets
- Refresh tokens are stored in the DB (RefreshToken model) so they can be revoked
- Refresh tokens are not rotated on /token; they live until expiry or logout
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models.schemas.auth import LoginSchema, RefreshSchema, LogoutSchema, TokenPairOutSchema

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_pair_out_schema = TokenPairOutSchema()


def _sessions():
    return current_app.extensions["sessions"]


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [username]
           properties:
             username: { type: string, minLength: 3, maxLength: 30 }
    responses:
      200:
        description: OK (returns tokens)
        schema:
          type: object
          properties:
            accessToken: { type: string }
            refreshToken: { type: string }
      400:
        description: Invalid username
      429:
        description: Too many login attempts
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    pair = _sessions().login(data["username"])
    return jsonify(token_pair_out_schema.dump(pair)), 200


@bp.post("/token")
def token():
    """
    Use a refresh token to obtain a new access token (no rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             token: { type: string }
    responses:
      200:
        description: OK
        schema:
          type: object
          properties:
            accessToken: { type: string }
      401:
        description: Refresh token missing
      403:
        description: Invalid, revoked or expired refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)

    access_token = _sessions().refresh(data.get("token"))
    return jsonify({"accessToken": access_token}), 200


@bp.delete("/logout")
def logout():
    """
    logout: revokes the refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [token]
           properties:
             token: { type: string }
    responses:
      204:
        description: Logged out
      400:
        description: Token missing, not found or already revoked
    """
    payload = request.get_json(silent=True) or {}
    data = logout_schema.load(payload)

    _sessions().logout(data["token"])
    return ("", 204)
