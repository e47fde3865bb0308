"""
GitHub REST API client for the Pages deployer.

Covers the four calls the deployment needs: who am I, does the repo exist,
create it, and switch on Pages.
"""

from typing import Optional

import requests

from pages_config import GITHUB_API_URL, GITHUB_API_TIMEOUT, PAT_SCOPES, PAT_URL, get_logger
from pages_errors import (
    AuthenticationFailure,
    GitHubAPIError,
    PagesConfigFailure,
    RepositoryCreateFailure,
)

log = get_logger("github")


def _json_body(resp: requests.Response) -> dict:
    """Parsed body of a successful response; {} when GitHub sent no JSON object."""
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_text(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:500]
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return resp.text[:500]


class GitHubClient:
    def __init__(self, token: str, api_url: str = GITHUB_API_URL,
                 session: Optional[requests.Session] = None, timeout: int = GITHUB_API_TIMEOUT):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"token {token}",
        })

    def _url(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    def authenticated_login(self) -> str:
        """Resolve the login the token belongs to."""
        hints = [
            "Please check that your PAT token is valid and has required scopes:",
            *[f"  - {scope}" for scope in PAT_SCOPES],
            f"Generate a PAT at: {PAT_URL}",
        ]
        try:
            resp = self.session.get(self._url("user"), timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthenticationFailure(f"Failed to authenticate with GitHub: {e}", hints) from e

        if resp.status_code != 200:
            raise AuthenticationFailure(
                f"Failed to authenticate with GitHub ({resp.status_code}: {_error_text(resp)})", hints)

        login = _json_body(resp).get("login", "")
        if not login:
            raise AuthenticationFailure("Failed to authenticate with GitHub: no login in response", hints)
        return login

    def repo_exists(self, owner: str, repo: str) -> bool:
        try:
            resp = self.session.get(self._url(f"repos/{owner}/{repo}"), timeout=self.timeout)
        except requests.RequestException as e:
            raise GitHubAPIError(f"Could not query repository {owner}/{repo}: {e}") from e

        if resp.status_code == 200:
            return True
        if resp.status_code == 404:
            return False
        raise GitHubAPIError(
            f"Could not query repository {owner}/{repo} ({resp.status_code}: {_error_text(resp)})")

    def create_repo(self, repo: str, public: bool = True, description: str = "") -> dict:
        payload = {"name": repo, "private": not public, "auto_init": False}
        if description:
            payload["description"] = description
        try:
            resp = self.session.post(self._url("user/repos"), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise RepositoryCreateFailure(f"Failed to create repository {repo}: {e}") from e

        if resp.status_code == 201:
            log.info(f"  Created repository {repo}")
            return _json_body(resp)

        hints = []
        if resp.status_code == 422:
            hints.append("The name may have been taken since the existence check; "
                         "re-run the deployment to push to the existing repository.")
        raise RepositoryCreateFailure(
            f"Failed to create repository {repo} ({resp.status_code}: {_error_text(resp)})", hints)

    def enable_pages(self, owner: str, repo: str, branch: str, path: str = "/") -> dict:
        payload = {"source": {"branch": branch, "path": path}}
        try:
            resp = self.session.post(self._url(f"repos/{owner}/{repo}/pages"),
                                     json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise PagesConfigFailure(f"Pages configuration request failed: {e}") from e

        if resp.status_code not in (200, 201):
            raise PagesConfigFailure(
                f"Pages configuration returned {resp.status_code}: {_error_text(resp)}")
        return _json_body(resp)
