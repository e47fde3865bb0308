import copy
import json
import logging
import shutil
from pathlib import Path

import pytest

from git_client import GitClient, GitResult
from pages_config import LOGGER_NAME
from pages_errors import PagesConfigFailure

COMPLETE_PROFILE = {
    "profile": {
        "name": "Ada Lovelace",
        "title": "Research Engineer",
        "organization": "Analytical Engines Ltd",
        "profileImage": "assets/images/profile.jpg",
        "cvPath": "assets/cv.pdf",
    },
    "contact": {
        "email": "ada@example.com",
        "phone": "+44 20 0000 0000",
        "location": "London, UK",
        "githubUsername": "ada-l",
        "linkedin": "https://www.linkedin.com/in/ada",
    },
    "bio": {
        "introduction": "I build engines.",
        "background": "Mathematics.",
        "researchFocus": "Computation",
    },
    "siteConfig": {"siteTitle": "Ada Lovelace"},
    "publications": [{"title": "Notes", "image": "assets/images/notes.png"}],
    "projects": [{"name": "Engine", "media": {"src": "assets/media/engine.gif"}}],
    "education": [{"school": "Home", "logo": "assets/logos/home.png"}],
    "navigation": [{"label": "About", "href": "#about"}],
    "skills": {"languages": ["Python", "Ada"], "tools": ["git"]},
}

REFERENCED_FILES = [
    "assets/images/profile.jpg",
    "assets/cv.pdf",
    "assets/images/notes.png",
    "assets/media/engine.gif",
    "assets/logos/home.png",
    ".github/workflows/deploy-pages.yml",
]

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class InspectableGit(GitClient):
    """GitClient plus read-back helpers the tests assert on."""

    def get_config(self, key):
        result = self.run("config", "--local", "--get", key)
        return result.output if result.ok else ""

    def commit_count(self):
        result = self.run("rev-list", "--count", "HEAD")
        return int(result.output) if result.ok and result.output.isdigit() else 0


def write_profile(root: Path, record) -> Path:
    path = root / "data" / "profile.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(record, str):
        path.write_text(record, encoding="utf-8")
    else:
        path.write_text(json.dumps(record, indent=2), encoding="utf-8")
    return path


def drop(record: dict, path: str) -> dict:
    record = copy.deepcopy(record)
    *parents, leaf = path.split(".")
    node = record
    for key in parents:
        node = node[key]
    node.pop(leaf)
    return record


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def profile() -> dict:
    return copy.deepcopy(COMPLETE_PROFILE)


@pytest.fixture
def site(tmp_path) -> Path:
    """A working tree holding every file the complete profile references."""
    for rel in REFERENCED_FILES:
        target = tmp_path / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("x", encoding="utf-8")
    (tmp_path / "index.html").write_text("<html></html>", encoding="utf-8")
    return tmp_path


class FakeGit:
    """In-memory stand-in for GitClient."""

    def __init__(self, push_result: GitResult = None):
        self.repo = False
        self.branch = ""
        self.config = {}
        self.commits = []
        self.dirty = True
        self.remotes = {}
        self.pushes = []
        self.push_result = push_result or GitResult(0)

    def is_repo(self):
        return self.repo

    def init(self):
        self.repo = True
        self.branch = "master"

    def ensure_branch(self, branch):
        changed = self.branch != branch
        self.branch = branch
        return changed

    def set_config(self, key, value):
        self.config[key] = value

    def add_all(self):
        pass

    def has_staged_changes(self):
        return self.dirty

    def commit(self, message):
        self.commits.append(message)
        self.dirty = False

    def remote_url(self, name):
        return self.remotes.get(name, "")

    def add_remote(self, name, url):
        self.remotes[name] = url

    def set_remote_url(self, name, url):
        self.remotes[name] = url

    def push(self, remote, branch, token=""):
        self.pushes.append((remote, branch, token))
        return self.push_result


class FakeGitHub:
    """In-memory stand-in for GitHubClient."""

    def __init__(self, login="ada-l", existing=(), pages_error=False, login_error=None):
        self.login = login
        self.repos = set(existing)
        self.created = []
        self.pages_calls = []
        self.pages_error = pages_error
        self.login_error = login_error
        self.tokens = []

    def __call__(self, token):
        self.tokens.append(token)
        return self

    def authenticated_login(self):
        if self.login_error:
            raise self.login_error
        return self.login

    def repo_exists(self, owner, repo):
        return f"{owner}/{repo}" in self.repos

    def create_repo(self, repo, public=True, description=""):
        self.created.append((repo, public))
        self.repos.add(f"{self.login}/{repo}")
        return {"name": repo}

    def enable_pages(self, owner, repo, branch, path="/"):
        self.pages_calls.append((owner, repo, branch, path))
        if self.pages_error:
            raise PagesConfigFailure("Pages configuration returned 409: already enabled")
        return {}


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


def all_tools(tool):
    return f"/usr/bin/{tool}"
