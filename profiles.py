"""
Profile service.

One profile per user. POST /profile merges the submitted fields into the
stored profile; experience and education entries are added newest-first
and removed by id.
"""
import logging
from typing import List

from database import populate, to_object_id, to_public
from errors import MSG, NotFound
from schemas import Education, Experience, Profile
from validation import check

logger = logging.getLogger(__name__)

COLLECTION = "profile"
USER_FIELDS = ["name", "avatar"]

PROFILE_FIELDS = ["company", "website", "location", "bio", "status", "githubusername"]
SOCIAL_FIELDS = ["youtube", "twitter", "facebook", "linkedin", "instagram", "devpost"]

NO_PROFILE = "There is no profile for this user"


def _with_user(db, profile: dict) -> dict:
    return to_public(populate(db, profile, "user", "user", USER_FIELDS))


def _require_own_profile(db, user_id) -> dict:
    profile = db[COLLECTION].find_one({"user": to_object_id(user_id)})
    if not profile:
        raise NotFound(NO_PROFILE, status_code=400, envelope=MSG)
    return profile


def parse_skills(skills: str) -> List[str]:
    return [skill.strip() for skill in skills.split(",")]


def build_profile_fields(fields: dict) -> dict:
    """Flatten the submitted fields into a $set document.

    Falsy values count as absent. Social links become dotted keys so each
    one merges on its own.
    """
    update = {}
    for key in PROFILE_FIELDS:
        if fields.get(key):
            update[key] = fields[key]
    if fields.get("skills"):
        update["skills"] = parse_skills(fields["skills"])

    social = fields.get("social") or {}
    for key in SOCIAL_FIELDS:
        value = social.get(key) or fields.get(key)
        if value:
            update[f"social.{key}"] = value
    return update


def upsert_profile(db, user_id: str, fields: dict) -> dict:
    check(fields) \
        .required("status", "Status is required") \
        .required("skills", "Skills is required") \
        .validate()

    user_oid = to_object_id(user_id)
    update = build_profile_fields(fields)

    profiles = db[COLLECTION]
    if profiles.find_one({"user": user_oid}):
        profiles.update_one({"user": user_oid}, {"$set": update})
        return to_public(profiles.find_one({"user": user_oid}))

    social = {k.split(".", 1)[1]: update.pop(k) for k in list(update) if k.startswith("social.")}
    doc = Profile(user=user_oid, social=social, **update).to_mongo()
    doc["_id"] = profiles.insert_one(doc).inserted_id
    return to_public(doc)


def get_profile_by_user(db, user_id: str) -> dict:
    return _with_user(db, _require_own_profile(db, user_id))


def list_all_profiles(db) -> List[dict]:
    return [_with_user(db, p) for p in db[COLLECTION].find()]


def get_profile_by_user_id(db, other_user_id) -> dict:
    oid = to_object_id(other_user_id)
    if oid is None:
        raise NotFound("User does not exist", status_code=400)
    profile = db[COLLECTION].find_one({"user": oid})
    if not profile:
        raise NotFound("User does not have public profile", status_code=400)
    return _with_user(db, profile)


def delete_profile_and_user(db, user_id: str):
    # Posts written by the user are left in place.
    oid = to_object_id(user_id)
    if oid is None:
        return
    db[COLLECTION].find_one_and_delete({"user": oid})
    db["user"].find_one_and_delete({"_id": oid})
    logger.info("Deleted profile and user %s", user_id)


def _add_entry(db, user_id: str, field: str, entry) -> dict:
    profile = _require_own_profile(db, user_id)
    entries = profile.setdefault(field, [])
    entries.insert(0, entry.to_mongo())
    db[COLLECTION].update_one({"_id": profile["_id"]}, {"$set": {field: entries}})
    return to_public(profile)


def _remove_entry(db, user_id: str, field: str, entry_id) -> dict:
    profile = _require_own_profile(db, user_id)
    entries = profile.get(field, [])
    ids = [str(e.get("_id")) for e in entries]
    if str(entry_id) in ids:
        entries.pop(ids.index(str(entry_id)))
        db[COLLECTION].update_one({"_id": profile["_id"]}, {"$set": {field: entries}})
    return to_public(profile)


def _entry_from(model, entry: dict):
    return model.model_validate({k: v for k, v in entry.items() if v is not None})


def add_experience(db, user_id: str, entry: dict) -> dict:
    check(entry) \
        .required("title", "Title is required") \
        .required("company", "Company is required") \
        .required("from", "Form date is required") \
        .validate()
    return _add_entry(db, user_id, "experience", _entry_from(Experience, entry))


def remove_experience(db, user_id: str, experience_id) -> dict:
    """Unknown ids leave the profile untouched."""
    return _remove_entry(db, user_id, "experience", experience_id)


def add_education(db, user_id: str, entry: dict) -> dict:
    check(entry) \
        .required("school", "School is required") \
        .required("degree", "Degree is required") \
        .required("fieldofstudy", "Field of study is required") \
        .required("from", "Form date is required") \
        .validate()
    return _add_entry(db, user_id, "education", _entry_from(Education, entry))


def remove_education(db, user_id: str, education_id) -> dict:
    return _remove_entry(db, user_id, "education", education_id)
