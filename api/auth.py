"""
Authentication blueprint:
- POST /register
- POST /login
- POST /refresh
- POST /logout          (access token)
- POST /logout-all      (access token)
- GET  /me, /profile    (access token)
- POST /verify-email    (access token)
- POST /forgot-password
- POST /reset-password

Views only parse input and shape responses; the rules live in SessionManager.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import (
    RegisterSchema,
    LoginSchema,
    RefreshTokenSchema,
    ForgotPasswordSchema,
    ResetPasswordSchema,
    ProfileOutSchema,
)
from utils.decorators import jwt_required

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
forgot_password_schema = ForgotPasswordSchema()
reset_password_schema = ResetPasswordSchema()
profile_out_schema = ProfileOutSchema()


def sessions():
    return current_app.extensions["session_manager"]


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Missing or malformed fields
      409:
        description: Email already registered
    """
    data = register_schema.load(request.get_json(silent=True) or {})
    user = sessions().register(data["email"], data["password"], name=data.get("name"))
    return jsonify(
        {
            "status": 1,
            "message": "User created successfully",
            "userId": user.id,
        }
    ), 201


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
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    result = sessions().login(data["email"], data["password"])
    return jsonify(
        {
            "status": 1,
            "message": "Login successful",
            "accessToken": result.tokens.access_token,
            "refreshToken": result.tokens.refresh_token,
            "userId": result.user_id,
            "role": result.role,
        }
    ), 200


@bp.post("/refresh")
def refresh():
    """
    Redeem a refresh token for a new access/refresh pair (rotation)
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
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New token pair
      403:
        description: Invalid, revoked, expired or outdated refresh token
    """
    data = refresh_schema.load(request.get_json(silent=True) or {})
    tokens = sessions().refresh(data["refresh_token"])
    return jsonify(
        {
            "accessToken": tokens.access_token,
            "refreshToken": tokens.refresh_token,
        }
    ), 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: revoke one refresh token (idempotent)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    data = refresh_schema.load(request.get_json(silent=True) or {})
    sessions().logout(data["refresh_token"], g.user_id)
    return jsonify({"status": 1, "message": "Logged out successfully"}), 200


@bp.post("/logout-all")
@jwt_required()
def logout_all():
    """
    Logout from all devices: revoke every session and bump the token version
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out everywhere
      401:
        description: Unauthorized
    """
    revoked = sessions().logout_all(g.user_id)
    return jsonify(
        {
            "status": 1,
            "message": "Logged out from all devices",
            "revoked": revoked,
        }
    ), 200


@bp.get("/me")
@bp.get("/profile")
@jwt_required()
def me():
    """
    Get current user info
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: User no longer exists
    """
    user = sessions().get_profile(g.user_id)
    return jsonify(profile_out_schema.dump(user)), 200


@bp.post("/verify-email")
@jwt_required()
def verify_email():
    """
    Mark the current user's email as verified
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Email verified
    """
    sessions().verify_email(g.user_id)
    return jsonify({"status": 1, "message": "Email verified"}), 200


@bp.post("/forgot-password")
def forgot_password():
    """
    Request a password reset. The token is mailed, never returned.
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
           required: [email]
           properties:
             email: { type: string }
    responses:
      200:
        description: Same answer whether or not the account exists
    """
    data = forgot_password_schema.load(request.get_json(silent=True) or {})
    sessions().request_password_reset(data["email"])
    return jsonify(
        {
            "status": 1,
            "message": "If the account exists, a password reset link has been sent",
        }
    ), 200


@bp.post("/reset-password")
def reset_password():
    """
    Reset the password with a reset token
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
           required: [resetToken, newPassword]
           properties:
             resetToken: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed
      400:
        description: Invalid or expired reset token
    """
    data = reset_password_schema.load(request.get_json(silent=True) or {})
    sessions().reset_password(data["reset_token"], data["new_password"])
    return jsonify({"status": 1, "message": "Password reset successfully"}), 200
