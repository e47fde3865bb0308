#!/usr/bin/env python3
"""
Automated GitHub Pages Deployer
===============================
Reads data/profile.json, authenticates to GitHub with a Personal Access
Token, and publishes the working tree to <username>.github.io, creating the
repository when it does not exist yet and maintaining the CNAME file for a
custom domain.

Usage:
    export GH_TOKEN="ghp_xxxxxxxxxxxxx"
    python deploy_pages.py

Or:
    python deploy_pages.py --token ghp_xxxxxxxxxxxxx

Configuration via environment variables or .env file.
"""

import argparse
import os
import shutil
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from git_client import GitClient
from github_client import GitHubClient
from pages_config import (
    CNAME_FILE,
    DEFAULT_BRANCH,
    GITHUB_WEB_URL,
    PAGES_A_RECORDS,
    PAT_SCOPES,
    PAT_URL,
    PROFILE_JSON,
    REMOTE_NAME,
    TOKEN_ENV_VAR,
    get_logger,
    setup_logging,
)
from pages_errors import (
    AuthenticationFailure,
    DeployError,
    IdentityMismatch,
    MissingDependency,
    MissingRequiredField,
    PagesConfigFailure,
    PushFailure,
)
from profile_record import load_profile, text_field

log = get_logger("deploy")

# Tools we shell out to, with install instructions
REQUIRED_TOOLS = {
    "git": "Install git from: https://git-scm.com/downloads",
}

GITHUB_USERNAME_HINTS = [
    "Please add the GitHub username to the contact section in profile.json:",
    '  "contact": { "githubUsername": "your-github-username", ... }',
]


# ---------------------------------------------------------------------------
# Data Models
# ---------------------------------------------------------------------------

class CnameAction(str, Enum):
    WRITTEN = "written"
    REMOVED = "removed"
    ABSENT = "absent"


@dataclass
class ProfileFields:
    name: str
    email: str
    github_username: str
    domain: str = ""


@dataclass
class DeployResult:
    owner: str
    repo_name: str
    domain: str = ""
    committed: bool = False
    repo_created: bool = False
    pages_configured: bool = False
    cname: str = CnameAction.ABSENT.value
    identity_mismatch: Optional[IdentityMismatch] = None
    dns_records: list = field(default_factory=list)

    @property
    def repo_url(self) -> str:
        return f"{GITHUB_WEB_URL}/{self.owner}/{self.repo_name}"

    @property
    def actions_url(self) -> str:
        return f"{self.repo_url}/actions"

    @property
    def site_url(self) -> str:
        return f"https://{self.domain or self.repo_name}"


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

def check_dependencies(tools: dict = REQUIRED_TOOLS, which: Callable = shutil.which):
    """Fail fast, naming every missing tool at once."""
    missing = [tool for tool in tools if which(tool) is None]
    for tool in tools:
        if tool not in missing:
            log.info(f"  ✓ {tool} is installed")
    if missing:
        raise MissingDependency(missing, [tools[tool] for tool in missing])


def extract_fields(record: dict, source: Path = PROFILE_JSON) -> ProfileFields:
    fields = ProfileFields(
        name=text_field(record, "profile.name"),
        email=text_field(record, "contact.email"),
        github_username=text_field(record, "contact.githubUsername"),
        domain=text_field(record, "siteConfig.domain"),
    )
    if not fields.name:
        raise MissingRequiredField("profile.name", str(source))
    if not fields.email:
        raise MissingRequiredField("contact.email", str(source))
    if not fields.github_username:
        raise MissingRequiredField("contact.githubUsername", str(source), GITHUB_USERNAME_HINTS)
    return fields


def repo_name_for(username: str) -> str:
    """A user's primary Pages site lives in <username>.github.io."""
    return f"{username}.github.io"


def remote_url_for(owner: str, repo_name: str) -> str:
    return f"{GITHUB_WEB_URL}/{owner}/{repo_name}.git"


def resolve_token(cli_token: Optional[str], environ: Optional[dict] = None) -> str:
    """--token wins over the environment."""
    if cli_token:
        return cli_token
    environ = os.environ if environ is None else environ
    return environ.get(TOKEN_ENV_VAR, "")


def reconcile_cname(root: Path, domain: str) -> CnameAction:
    cname = Path(root) / CNAME_FILE
    if domain:
        cname.write_text(f"{domain}\n", encoding="utf-8")
        return CnameAction.WRITTEN
    if cname.exists():
        cname.unlink()
        return CnameAction.REMOVED
    return CnameAction.ABSENT


def commit_message(name: str, repo_name: str) -> str:
    return (f"Deploy portfolio for {name}\n\n"
            f"Portfolio website deployed via automated deployment script.\n"
            f"Site: https://{repo_name}/\n\n"
            f"🤖 Automated deployment")


def dns_records(owner: str) -> list:
    """(type, host, value) rows the owner must add at their registrar."""
    records = [("A", "@", ip) for ip in PAGES_A_RECORDS]
    records.append(("CNAME", "www", f"{owner}.github.io"))
    return records


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

class Deployer:
    def __init__(self, work_tree: Path, profile_path: Path = PROFILE_JSON, token: str = "",
                 git: Optional[GitClient] = None,
                 github_factory: Callable = GitHubClient,
                 which: Callable = shutil.which):
        self.work_tree = Path(work_tree)
        profile_path = Path(profile_path)
        self.profile_path = profile_path if profile_path.is_absolute() else self.work_tree / profile_path
        self.token = token
        self.git = git or GitClient(self.work_tree)
        self.github_factory = github_factory
        self.which = which

    def run(self) -> DeployResult:
        log.info("==> Checking dependencies...")
        check_dependencies(which=self.which)

        log.info(f"==> Parsing profile data from {self.profile_path}...")
        fields = extract_fields(load_profile(self.profile_path), self.profile_path)
        log.info(f"  ✓ Name: {fields.name}")
        log.info(f"  ✓ Email: {fields.email}")
        log.info(f"  ✓ GitHub Username: {fields.github_username}")

        repo_name = repo_name_for(fields.github_username)
        log.info(f"  ✓ Repository: {repo_name}")
        if fields.domain:
            log.info(f"  ✓ Custom Domain: {fields.domain}")
        else:
            log.info("  No custom domain configured (will use default GitHub Pages URL)")

        log.info("==> Authenticating with GitHub...")
        github, owner, mismatch = self._authenticate(fields.github_username)
        if mismatch:
            repo_name = repo_name_for(owner)
            log.info(f"  Updated repository name to: {repo_name}")
        result = DeployResult(owner=owner, repo_name=repo_name, domain=fields.domain,
                              identity_mismatch=mismatch)

        # Local config needs a repository, so initialise before configuring identity
        log.info("==> Setting up git repository...")
        self._prepare_repository()

        log.info("==> Configuring git identity...")
        self.git.set_config("user.name", fields.name)
        self.git.set_config("user.email", fields.email)
        log.info(f"  ✓ Git configured with name: {fields.name}")
        log.info(f"  ✓ Git configured with email: {fields.email}")

        log.info("==> Managing CNAME file...")
        action = reconcile_cname(self.work_tree, fields.domain)
        result.cname = action.value
        if action is CnameAction.WRITTEN:
            log.info(f"  ✓ CNAME file created/updated with: {fields.domain}")
        elif action is CnameAction.REMOVED:
            log.info("  ✓ CNAME file removed (using default GitHub Pages URL)")
        else:
            log.info("  No CNAME file to remove")

        exists = github.repo_exists(owner, repo_name)
        if exists:
            log.info(f"  Repository {repo_name} already exists on GitHub")
        else:
            log.info(f"  Repository {repo_name} does not exist, will be created")

        log.info("==> Committing changes...")
        result.committed = self._commit(fields.name, repo_name)

        log.info("==> Deploying to GitHub...")
        self._ensure_remote(owner, repo_name)
        if not exists:
            log.info("  Creating repository on GitHub...")
            github.create_repo(repo_name, public=True,
                               description=f"Portfolio website for {fields.name}")
            result.repo_created = True
        self._push(created=result.repo_created)

        log.info("==> Configuring GitHub Pages...")
        try:
            github.enable_pages(owner, repo_name, DEFAULT_BRANCH, "/")
            result.pages_configured = True
            log.info("  ✓ GitHub Pages enabled")
        except PagesConfigFailure as e:
            log.info(f"  GitHub Pages may already be configured ({e.message})")

        if fields.domain:
            result.dns_records = dns_records(owner)
        report(result)
        return result

    def _authenticate(self, username: str):
        if not self.token:
            raise AuthenticationFailure(
                "GitHub Personal Access Token (PAT) not provided",
                [
                    f'Usage: export {TOKEN_ENV_VAR}="ghp_xxxxx" && deploy-pages',
                    'Or:    deploy-pages --token "ghp_xxxxx"',
                    f"Generate a PAT at: {PAT_URL}",
                    f"Required scopes: {', '.join(PAT_SCOPES)}",
                ],
            )
        github = self.github_factory(self.token)
        login = github.authenticated_login()
        log.info(f"  ✓ Authenticated as: {login}")

        mismatch = None
        if login != username:
            mismatch = IdentityMismatch(configured=username, authenticated=login)
            log.warning(f"  ⚠ {mismatch}")
            log.warning(f"  ⚠ The repository will be created under {login}'s account")
        return github, login, mismatch

    def _prepare_repository(self):
        if not self.git.is_repo():
            log.info("  Initializing git repository...")
            self.git.init()
            log.info("  ✓ Git repository initialized")
        if self.git.ensure_branch(DEFAULT_BRANCH):
            log.info(f"  ✓ Switched to {DEFAULT_BRANCH} branch")

    def _commit(self, name: str, repo_name: str) -> bool:
        self.git.add_all()
        if not self.git.has_staged_changes():
            log.info("  No changes to commit")
            return False
        self.git.commit(commit_message(name, repo_name))
        log.info("  ✓ Changes committed")
        return True

    def _ensure_remote(self, owner: str, repo_name: str):
        expected = remote_url_for(owner, repo_name)
        current = self.git.remote_url(REMOTE_NAME)
        if not current:
            log.info(f"  Adding remote '{REMOTE_NAME}'...")
            self.git.add_remote(REMOTE_NAME, expected)
        elif current != expected:
            log.warning(f"  ⚠ Updating remote URL to: {expected}")
            self.git.set_remote_url(REMOTE_NAME, expected)
        else:
            log.info(f"  Remote '{REMOTE_NAME}' already configured")

    def _push(self, created: bool):
        pushed = self.git.push(REMOTE_NAME, DEFAULT_BRANCH, token=self.token)
        if pushed.ok:
            log.info("  ✓ Code pushed to GitHub")
            return
        if created:
            hints = ["The repository was created; re-run deploy-pages to retry the push"]
        else:
            hints = [f"You may need to use: git push -u {REMOTE_NAME} {DEFAULT_BRANCH} --force"]
        raise PushFailure(f"Failed to push to repository: {pushed.stderr.strip()}", hints)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def report(result: DeployResult):
    log.info("=" * 50)
    log.info("🎉 DEPLOYMENT SUCCESSFUL!")
    log.info("=" * 50)
    log.info("📍 Important URLs:")
    log.info(f"   Repository:    {result.repo_url}")
    log.info(f"   Actions:       {result.actions_url}")
    log.info(f"   Live Site:     {result.site_url}")

    if result.domain:
        log.warning(f"IMPORTANT: Configure your DNS records for {result.domain}")
        log.info("Add these DNS records at your domain registrar:")
        for record_type, host, value in result.dns_records:
            log.info(f"  Type: {record_type + ',':<6} Host: {host + ',':<4} Value: {value}")

    log.info("⏳ GitHub Actions is building your site now...")
    log.info("Visit the Actions URL above to watch the deployment progress.")
    log.info("Your site should be live in 1-2 minutes!")

    if result.domain:
        log.info("After DNS is configured:")
        log.info(f"  1. Go to: {result.repo_url}/settings/pages")
        log.info(f"  2. Verify custom domain is set to: {result.domain}")
        log.info("  3. Enable 'Enforce HTTPS' once certificate is issued")

    log.info("Deployment complete! 🚀")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Deploy the portfolio site to GitHub Pages")
    parser.add_argument("--token", help=f"GitHub Personal Access Token (defaults to ${TOKEN_ENV_VAR})")
    args = parser.parse_args(argv)
    setup_logging()

    log.info("=" * 50)
    log.info("AUTOMATED PORTFOLIO DEPLOYMENT")
    log.info("=" * 50)

    try:
        Deployer(Path.cwd(), PROFILE_JSON, resolve_token(args.token)).run()
    except DeployError as e:
        log.error(f"✗ {e.message}")
        for hint in e.hints:
            log.error(f"  {hint}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
