"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_load, validate


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))

    @post_load
    def _normalize(self, data, **kwargs):
        data["email"] = data["email"].strip().lower()
        return data


class RefreshSchema(Schema):
    """Input payload for rotating a refresh token."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(
        required=True,
        data_key="refreshToken",
        validate=validate.Length(min=1, max=4096),
    )


class TokenPairSchema(Schema):
    """Response payload with the issued token pair."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    token_type = fields.String(required=True, data_key="tokenType")
    expires_in = fields.Integer(required=True, data_key="expiresInSeconds")


class WhoAmISchema(Schema):
    """Response payload echoing the accepted bearer token."""

    subject = fields.String(required=True)
    roles = fields.List(fields.String(), required=True)
