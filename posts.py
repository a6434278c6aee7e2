"""
Post service: creation, public listing, deletion, likes and comments.

Posts are read, mutated in memory and written back. Embedded likes and
comments are newest-first: new entries are inserted at index 0.
"""
import logging
from typing import Any, List

from database import to_object_id, to_public
from errors import BadRequest, NotFound, Unauthorized
from schemas import Comment, Like, Post
from users import require_user
from validation import check

logger = logging.getLogger(__name__)

COLLECTION = "post"

POST_NOT_FOUND = "Post not found"
POST_NOT_FOUND_OR_PRIVATE = "Post not found or is private"


def _find_post(db, post_id):
    oid = to_object_id(post_id)
    if oid is None:
        return None
    return db[COLLECTION].find_one({"_id": oid})


def _find_public_post(db, post_id) -> dict:
    post = _find_post(db, post_id)
    if post is None or not post.get("ispublic", True):
        raise NotFound(POST_NOT_FOUND_OR_PRIVATE)
    return post


def _save_field(db, post: dict, field: str):
    db[COLLECTION].update_one({"_id": post["_id"]}, {"$set": {field: post[field]}})


def create_post(db, user_id: str, text: str, ispublic: Any = None) -> dict:
    """Create a post authored by `user_id`.

    Only an actual boolean False makes the post private; "false", 0 and
    missing values all keep the default of public.
    """
    check({"text": text}).required("text", "Comment text is required").validate()
    user = require_user(db, user_id)

    post = Post(
        user=user["_id"],
        text=text,
        name=user.get("name"),
        avatar=user.get("avatar"),
    )
    if isinstance(ispublic, bool) and not ispublic:
        post.ispublic = False

    doc = post.to_mongo()
    doc["_id"] = db[COLLECTION].insert_one(doc).inserted_id
    logger.info("User %s created post %s (public=%s)", user_id, doc["_id"], post.ispublic)
    return to_public(doc)


def list_public_posts(db) -> List[dict]:
    posts = db[COLLECTION].find({"ispublic": True}).sort("date", -1)
    return [to_public(p) for p in posts]


def get_post(db, post_id) -> dict:
    # Private posts are hidden from everyone, their author included.
    return to_public(_find_public_post(db, post_id))


def delete_post(db, post_id, requester_id: str):
    post = _find_post(db, post_id)
    if post is None:
        raise NotFound(POST_NOT_FOUND)

    if str(post["user"]) != str(requester_id):
        raise Unauthorized("User unauthorized to delete post")

    db[COLLECTION].delete_one({"_id": post["_id"]})
    logger.info("User %s deleted post %s", requester_id, post["_id"])


def _liked_by(post: dict, user_id: str) -> bool:
    return any(str(like["user"]) == str(user_id) for like in post.get("likes", []))


def like_post(db, post_id, requester_id: str) -> List[dict]:
    post = _find_public_post(db, post_id)

    if _liked_by(post, requester_id):
        raise BadRequest("Post already liked")

    likes = post.setdefault("likes", [])
    likes.insert(0, Like(user=to_object_id(requester_id)).to_mongo())
    _save_field(db, post, "likes")
    return to_public(likes)


def unlike_post(db, post_id, requester_id: str) -> List[dict]:
    post = _find_public_post(db, post_id)

    if not _liked_by(post, requester_id):
        raise BadRequest("Post was never liked")

    likes = post["likes"]
    remove_index = [str(like["user"]) for like in likes].index(str(requester_id))
    likes.pop(remove_index)
    _save_field(db, post, "likes")
    return to_public(likes)


def add_comment(db, post_id, user_id: str, text: str) -> List[dict]:
    check({"text": text}).required("text", "Text is required").validate()
    post = _find_public_post(db, post_id)
    user = require_user(db, user_id)

    comment = Comment(
        user=user["_id"],
        text=text,
        name=user.get("name"),
        avatar=user.get("avatar"),
    )
    comments = post.setdefault("comments", [])
    comments.insert(0, comment.to_mongo())
    _save_field(db, post, "comments")
    return to_public(comments)


def delete_comment(db, post_id, comment_id, requester_id: str) -> List[dict]:
    """Remove a comment written by the requester; returns the remaining comments."""
    post = _find_post(db, post_id)
    if post is None:
        raise NotFound(POST_NOT_FOUND)

    comments = post.get("comments", [])
    comment = next((c for c in comments if str(c["_id"]) == str(comment_id)), None)
    if comment is None:
        raise NotFound("Comment does not exist")

    if str(comment["user"]) != str(requester_id):
        raise Unauthorized("User not authorized")

    comments.remove(comment)
    _save_field(db, post, "comments")
    return to_public(comments)
