import logging
import os
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

import github_repos
import posts
import profiles
import users
from database import get_db
from errors import ApiError
from security import get_current_user_id

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("devconnector")

# App setup
app = FastAPI(title="DevConnector API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error rendering
@app.exception_handler(ApiError)
async def api_error_handler(request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        errors.append({
            "msg": err.get("msg"),
            "param": ".".join(loc[1:]),
            "location": loc[0] if loc else "body",
        })
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(Exception)
async def server_error_handler(request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return PlainTextResponse("Server Error", status_code=500)


# Models for requests
class RegisterBody(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class PostBody(BaseModel):
    text: Optional[str] = None
    # Kept raw: only a JSON boolean false makes a post private.
    ispublic: Any = None


class CommentBody(BaseModel):
    text: Optional[str] = None


class SocialBody(BaseModel):
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    devpost: Optional[str] = None


class ProfileBody(SocialBody):
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    githubusername: Optional[str] = None
    skills: Optional[str] = None
    social: Optional[SocialBody] = None


class ExperienceBody(BaseModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    current: Optional[bool] = None
    description: Optional[str] = None


class EducationBody(BaseModel):
    school: Optional[str] = None
    degree: Optional[str] = None
    fieldofstudy: Optional[str] = None
    location: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    current: Optional[bool] = None
    description: Optional[str] = None


def json_body(model):
    """Dependency parsing the request body into `model`.

    A missing, malformed or non-object body reads as {} so the field checks
    still report which required fields are missing.
    """
    async def dependency(request: Request):
        try:
            data = await request.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise RequestValidationError([{**err, "loc": ("body", *err["loc"])} for err in e.errors()])
    return dependency


def body_fields(body: BaseModel) -> dict:
    return body.model_dump(by_alias=True, exclude_none=True)


@app.get("/")
def read_root():
    return {"message": "DevConnector API is running"}


# Users / Auth Endpoints
@app.post("/users")
def register(body: RegisterBody = Depends(json_body(RegisterBody)), db=Depends(get_db)):
    return users.register_user(db, body_fields(body))


@app.get("/auth")
def get_auth_user(user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return users.get_authenticated_user(db, user_id)


@app.post("/auth")
def login(body: LoginBody = Depends(json_body(LoginBody)), db=Depends(get_db)):
    try:
        return users.authenticate(db, body_fields(body))
    except ApiError:
        raise
    except Exception:
        logger.exception("Login failed")
        return PlainTextResponse("Server error", status_code=500)


# Posts Endpoints
@app.post("/posts")
def create_post(user_id: str = Depends(get_current_user_id), body: PostBody = Depends(json_body(PostBody)),
                db=Depends(get_db)):
    return posts.create_post(db, user_id, body.text, body.ispublic)


@app.get("/posts")
def get_posts(user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return posts.list_public_posts(db)


@app.get("/posts/{post_id}")
def get_post(post_id: str, user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return posts.get_post(db, post_id)


@app.delete("/posts/{post_id}")
def delete_post(post_id: str, user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    posts.delete_post(db, post_id, user_id)
    return {"msg": "Post removed"}


@app.put("/posts/like/{post_id}")
def like_post(post_id: str, user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return posts.like_post(db, post_id, user_id)


@app.put("/posts/unlike/{post_id}")
def unlike_post(post_id: str, user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return posts.unlike_post(db, post_id, user_id)


@app.post("/posts/comment/{post_id}")
def add_comment(post_id: str, user_id: str = Depends(get_current_user_id),
                body: CommentBody = Depends(json_body(CommentBody)), db=Depends(get_db)):
    return posts.add_comment(db, post_id, user_id, body.text)


@app.delete("/posts/comment/{post_id}/{comment_id}")
def delete_comment(post_id: str, comment_id: str, user_id: str = Depends(get_current_user_id),
                   db=Depends(get_db)):
    return posts.delete_comment(db, post_id, comment_id, user_id)


# Profile Endpoints
@app.get("/profile/me")
def get_my_profile(user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return profiles.get_profile_by_user(db, user_id)


@app.post("/profile")
def upsert_profile(user_id: str = Depends(get_current_user_id), body: ProfileBody = Depends(json_body(ProfileBody)),
                   db=Depends(get_db)):
    return profiles.upsert_profile(db, user_id, body_fields(body))


@app.get("/profile")
def get_profiles(db=Depends(get_db)):
    return profiles.list_all_profiles(db)


@app.get("/profile/user/{other_user_id}")
def get_profile_by_user_id(other_user_id: str, db=Depends(get_db)):
    return profiles.get_profile_by_user_id(db, other_user_id)


@app.delete("/profile")
def delete_profile(user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    profiles.delete_profile_and_user(db, user_id)
    return {"msg": "User deleted"}


@app.put("/profile/experience")
def add_experience(user_id: str = Depends(get_current_user_id),
                   body: ExperienceBody = Depends(json_body(ExperienceBody)), db=Depends(get_db)):
    return profiles.add_experience(db, user_id, body_fields(body))


@app.delete("/profile/experience/{exp_id}")
def delete_experience(exp_id: str, user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return profiles.remove_experience(db, user_id, exp_id)


@app.put("/profile/education")
def add_education(user_id: str = Depends(get_current_user_id),
                  body: EducationBody = Depends(json_body(EducationBody)), db=Depends(get_db)):
    return profiles.add_education(db, user_id, body_fields(body))


@app.delete("/profile/education/{edu_id}")
def delete_education(edu_id: str, user_id: str = Depends(get_current_user_id), db=Depends(get_db)):
    return profiles.remove_education(db, user_id, edu_id)


@app.get("/profile/github/{username}")
def get_github_repos(username: str):
    return github_repos.list_github_repos(username)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
