"""
Git wrapper for the Pages deployer.

Every call runs `git` inside one working tree and hands back a GitResult
instead of raising, unless the caller asks for check=True.
"""

import base64
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pages_config import GITHUB_WEB_URL
from pages_errors import GitCommandError


@dataclass
class GitResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return (self.stdout or "").strip()


def auth_env(token: str, host_url: str = GITHUB_WEB_URL, environ: Optional[dict] = None) -> dict:
    """Child environment that sends the token as an HTTP header for host_url only.

    The header is appended after any GIT_CONFIG_* entries already in the
    environment, so proxy or CA settings passed that way still apply.
    """
    environ = os.environ if environ is None else environ
    n = int(environ.get("GIT_CONFIG_COUNT", "0") or "0")
    basic = base64.b64encode(f"x-access-token:{token}".encode("utf-8")).decode("ascii")
    return {
        "GIT_CONFIG_COUNT": str(n + 1),
        f"GIT_CONFIG_KEY_{n}": f"http.{host_url.rstrip('/')}/.extraheader",
        f"GIT_CONFIG_VALUE_{n}": f"AUTHORIZATION: basic {basic}",
        "GIT_TERMINAL_PROMPT": "0",
    }


class GitClient:
    def __init__(self, work_tree: Path):
        self.work_tree = Path(work_tree)

    def run(self, *args: str, check: bool = False, env: Optional[dict] = None) -> GitResult:
        cmd = ["git", *args]
        child_env = None
        if env:
            child_env = dict(os.environ)
            child_env.update(env)
        proc = subprocess.run(
            cmd,
            cwd=str(self.work_tree),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=child_env,
        )
        result = GitResult(proc.returncode, proc.stdout or "", proc.stderr or "")
        if check and not result.ok:
            raise GitCommandError(
                f"git {' '.join(args)} failed ({result.returncode}): {result.stderr.strip()}")
        return result

    # -- repository state ---------------------------------------------------

    def is_repo(self) -> bool:
        result = self.run("rev-parse", "--is-inside-work-tree")
        return result.ok and result.output == "true"

    def init(self) -> GitResult:
        return self.run("init", check=True)

    def has_commits(self) -> bool:
        return self.run("rev-parse", "--verify", "--quiet", "HEAD").ok

    def current_branch(self) -> str:
        """Branch HEAD points at, including an unborn branch; "" when detached."""
        result = self.run("symbolic-ref", "--quiet", "--short", "HEAD")
        return result.output if result.ok else ""

    def ensure_branch(self, branch: str) -> bool:
        """Put HEAD on `branch`. Returns True when a switch was needed."""
        if self.current_branch() == branch:
            return False
        if self.has_commits():
            self.run("checkout", "-B", branch, check=True)
        else:
            self.run("symbolic-ref", "HEAD", f"refs/heads/{branch}", check=True)
        return True

    def set_config(self, key: str, value: str) -> GitResult:
        return self.run("config", "--local", key, value, check=True)

    # -- staging ------------------------------------------------------------

    def add_all(self) -> GitResult:
        return self.run("add", "-A", check=True)

    def has_staged_changes(self) -> bool:
        result = self.run("diff", "--cached", "--quiet")
        if result.returncode not in (0, 1):
            raise GitCommandError(f"git diff --cached failed: {result.stderr.strip()}")
        return result.returncode == 1

    def commit(self, message: str) -> GitResult:
        return self.run("commit", "-m", message, check=True)

    # -- remotes ------------------------------------------------------------

    def remote_url(self, name: str) -> str:
        result = self.run("remote", "get-url", name)
        return result.output if result.ok else ""

    def add_remote(self, name: str, url: str) -> GitResult:
        return self.run("remote", "add", name, url, check=True)

    def set_remote_url(self, name: str, url: str) -> GitResult:
        return self.run("remote", "set-url", name, url, check=True)

    def push(self, remote: str, branch: str, token: str = "") -> GitResult:
        return self.run("push", "-u", remote, branch, env=auth_env(token) if token else None)
