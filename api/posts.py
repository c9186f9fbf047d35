from flask import Blueprint, jsonify, g, current_app

from models.post import Post
from models.schemas.post import PostOutSchema
from utils.decorators import jwt_required

bp = Blueprint("posts", __name__)

post_list_out_schema = PostOutSchema(many=True)

DEMO_POSTS = [("Tamara", "Post 1"), ("Jim", "Post 2")]


@bp.get("/posts")
@jwt_required()
def list_posts():
    """
    Posts owned by the caller
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    responses:
      200:
        description: OK
        schema:
          type: array
          items:
            type: object
            properties:
              username: { type: string }
              title: { type: string }
      401:
        description: Access token missing or expired
      403:
        description: Invalid access token
    """
    session = current_app.extensions["storage"].get_session()
    rows = (
        session.query(Post)
        .filter(Post.username == g.current_user)
        .order_by(Post.created_at.desc())
        .all()
    )
    return jsonify(post_list_out_schema.dump(rows)), 200


def seed_demo_posts(storage):
    """Insert the demo posts once; a no-op when the table already has rows."""
    if storage.count(Post):
        return
    for username, title in DEMO_POSTS:
        storage.new(Post(username=username, title=title))
    storage.save()
