from marshmallow import Schema, EXCLUDE


class InputSchema(Schema):
    """Base for request bodies: unknown keys are dropped, not rejected."""

    class Meta:
        # clients send extra keys (user_id, device info, "status" echoes); the
        # owner always comes from the access token
        unknown = EXCLUDE
