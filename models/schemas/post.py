from marshmallow import Schema, fields


class PostOutSchema(Schema):
    username = fields.String()
    title = fields.String()
