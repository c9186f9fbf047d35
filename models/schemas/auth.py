from marshmallow import Schema, fields, pre_load, validate, EXCLUDE


def _strip(data, keys):
    if isinstance(data, dict):
        data = dict(data)
        for key in keys:
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
    return data


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=3, max=30))

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip(data, ("username",))


class RefreshSchema(Schema):
    """POST /token body. A missing token is answered with 401 by the session layer, not here."""
    class Meta:
        unknown = EXCLUDE

    token = fields.String(load_default=None, allow_none=True)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip(data, ("token",))


class LogoutSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    token = fields.String(required=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip(data, ("token",))


class TokenPairOutSchema(Schema):
    accessToken = fields.String(attribute="access_token")
    refreshToken = fields.String(attribute="refresh_token")
