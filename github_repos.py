import logging
import os

import requests

from errors import ApiError, MSG

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", "10"))


def list_github_repos(username: str) -> list:
    """Return the five oldest public repositories of a GitHub user."""
    headers = {"user-agent": "devconnector-api"}
    if GITHUB_TOKEN:
        headers["authorization"] = f"token {GITHUB_TOKEN}"

    response = requests.get(
        f"{GITHUB_API}/users/{username}/repos",
        params={"per_page": 5, "sort": "created:asc"},
        headers=headers,
        timeout=GITHUB_TIMEOUT,
    )
    if response.status_code != 200:
        logger.info("GitHub lookup for %s returned %s", username, response.status_code)
        raise ApiError(400, "No Github profile found", envelope=MSG)
    return response.json()
