"""
User registration and login.

Users are created here and read back by the post and profile services,
which only need the name and avatar snapshot.
"""
import hashlib
import logging
from typing import Optional

from errors import ApiError, NotFound
from database import to_object_id, to_public
from schemas import User
from security import create_access_token, hash_password, verify_password
from validation import check

logger = logging.getLogger(__name__)

COLLECTION = "user"
USER_NOT_FOUND = "User not found"


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"//www.gravatar.com/avatar/{digest}?s=200&r=pg&d=mm"


def user_to_public(u: dict) -> dict:
    if not u:
        return u
    u = {**u}
    u.pop("password", None)
    return u


def get_user_by_email(db, email: str) -> Optional[dict]:
    return db[COLLECTION].find_one({"email": email})


def get_user_by_id(db, user_id) -> Optional[dict]:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    return db[COLLECTION].find_one({"_id": oid})


def require_user(db, user_id) -> dict:
    """Load the user whose name/avatar gets snapshotted onto posts and comments."""
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return user


def register_user(db, body: dict) -> dict:
    check(body) \
        .required("name", "Name is required") \
        .email("email", "Please include a valid email") \
        .min_length("password", 6, "Please enter a password with 6 or more characters") \
        .validate()

    email = body["email"]
    if get_user_by_email(db, email):
        raise ApiError(400, "User already exists")

    user_doc = User(
        name=body["name"],
        email=email,
        password=hash_password(body["password"]),
        avatar=gravatar_url(email),
    ).to_mongo()
    inserted_id = db[COLLECTION].insert_one(user_doc).inserted_id
    logger.info("Registered user %s", inserted_id)

    return {"token": create_access_token(str(inserted_id))}


def authenticate(db, body: dict) -> dict:
    check(body) \
        .email("email", "Please include a valid email") \
        .exists("password", "Please enter password") \
        .validate()

    user = get_user_by_email(db, body["email"])
    if not user:
        raise ApiError(400, "User does not exist")

    if not verify_password(body["password"], user.get("password", "")):
        raise ApiError(400, "Password does not match")

    return {"token": create_access_token(str(user["_id"]))}


def get_authenticated_user(db, user_id: str) -> dict:
    user = get_user_by_id(db, user_id)
    if not user:
        raise ApiError(400, "User was deleted")
    return to_public(user_to_public(user))
