#!/usr/bin/env python3
"""
Profile Validator
=================
Validates data/profile.json before deployment to catch errors early:
required fields, formats, list sections, skills, referenced files and the
GitHub Actions workflow.

Usage:
    python validate_profile.py

Exit status is 0 when no errors were found, 1 otherwise.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pages_config import PROFILE_JSON, WORKFLOW_FILE, get_logger, setup_logging
from pages_errors import DeployError
from profile_record import (
    GITHUB_USERNAME_MAX,
    is_valid_domain,
    is_valid_email,
    is_valid_github_username,
    load_profile,
    lookup,
    sequence,
    text_field,
)

log = get_logger("validate")

# (json path, label, required)
FIELD_CHECKLIST = {
    "Profile": [
        ("profile.name", "Name", True),
        ("profile.title", "Title", True),
        ("profile.organization", "Organization", True),
        ("profile.profileImage", "Profile Image", True),
        ("profile.cvPath", "CV Path", False),
    ],
    "Contact": [
        ("contact.email", "Email", True),
        ("contact.phone", "Phone", False),
        ("contact.location", "Location", True),
        ("contact.githubUsername", "GitHub Username", True),
    ],
    "Bio": [
        ("bio.introduction", "Introduction", True),
        ("bio.background", "Background", True),
        ("bio.researchFocus", "Research Focus", False),
    ],
    "Site Configuration": [
        ("siteConfig.siteTitle", "Site Title", True),
        ("siteConfig.domain", "Custom Domain", False),
    ],
}

# (section, label, empty is an error)
LIST_SECTIONS = [
    ("publications", "Publications", False),
    ("projects", "Projects", False),
    ("education", "Education", False),
    ("navigation", "Navigation", True),
]

# (section, path inside each entry, label)
MEDIA_REFERENCES = [
    ("publications", "image", "Image"),
    ("projects", "media.src", "Media"),
    ("education", "logo", "Logo"),
]


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass
class ValidationReport:
    checks: list = field(default_factory=list)
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def passed(self, message: str):
        self.checks.append(message)
        log.info(f"  ✓ {message}")

    def error(self, message: str):
        self.checks.append(message)
        self.errors.append(message)
        log.error(f"  ✗ {message}")

    def warn(self, message: str):
        self.checks.append(message)
        self.warnings.append(message)
        log.warning(f"  ⚠ {message}")


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def check_fields(record: dict, report: ValidationReport):
    for section, fields in FIELD_CHECKLIST.items():
        log.info(f"{section} Section:")
        for path, label, required in fields:
            value = text_field(record, path)
            if value:
                report.passed(f"{label}: {value}")
            elif required:
                report.error(f"Missing required field: {label} ({path})")
            else:
                report.warn(f"Optional field not set: {label} ({path})")


def check_formats(record: dict, report: ValidationReport):
    email = text_field(record, "contact.email")
    if email:
        if is_valid_email(email):
            report.passed("Valid email format")
        else:
            report.error(f"Invalid email format: {email}")

    username = text_field(record, "contact.githubUsername")
    if username:
        if is_valid_github_username(username):
            report.passed("Valid GitHub username format")
        else:
            report.error(f"Invalid GitHub username format: {username}")
            log.info("  GitHub usernames can only contain alphanumeric characters and single hyphens")
        if len(username) > GITHUB_USERNAME_MAX:
            report.error(f"GitHub username too long (max {GITHUB_USERNAME_MAX} characters): {username}")

    domain = text_field(record, "siteConfig.domain")
    if domain:
        if is_valid_domain(domain):
            report.passed("Valid domain format")
        else:
            report.error(f"Invalid domain format: {domain}")


def check_lists(record: dict, report: ValidationReport):
    log.info("Validating lists...")
    for key, label, required in LIST_SECTIONS:
        count = len(sequence(record, key))
        if count > 0:
            report.passed(f"{label}: {count} entries")
        elif required:
            report.error(f"No {key} entries found ({key})")
        else:
            report.warn(f"No {key} entries found")


def check_skills(record: dict, report: ValidationReport):
    log.info("Validating skills...")
    skills = lookup(record, "skills")
    if not isinstance(skills, dict):
        report.warn("Skills section not found")
        return
    if not skills:
        report.warn("No skill categories found")
        return

    report.passed(f"Skills categories: {len(skills)}")
    for category, entries in skills.items():
        if isinstance(entries, list):
            report.passed(f"  → {category}: {len(entries)} skills")
        else:
            report.warn(f"Skills category '{category}' is not a list")


def _entry_paths(record: dict, section: str, inner_path: str) -> list:
    paths = []
    for entry in sequence(record, section):
        if isinstance(entry, dict):
            value = text_field(entry, inner_path)
            if value:
                paths.append(value)
    return paths


def check_referenced_files(record: dict, report: ValidationReport, root: Path):
    log.info("Checking referenced files...")
    for path, label in (("profile.profileImage", "Profile image"), ("profile.cvPath", "CV file")):
        value = text_field(record, path)
        if not value:
            continue
        if (root / value).is_file():
            report.passed(f"{label} exists: {value}")
        else:
            report.error(f"{label} not found: {value}")

    for section, inner_path, label in MEDIA_REFERENCES:
        for value in _entry_paths(record, section, inner_path):
            if (root / value).is_file():
                report.passed(f"✓ {value}")
            else:
                report.warn(f"{label} not found: {value} ({section})")


def check_workflow(report: ValidationReport, root: Path, workflow_file: Path = WORKFLOW_FILE):
    log.info("Checking GitHub Actions workflow...")
    if (root / workflow_file).is_file():
        report.passed(f"GitHub Actions workflow exists: {workflow_file}")
    else:
        report.error(f"GitHub Actions workflow not found: {workflow_file}")
        log.info("  This file is required for automatic deployment")


def validate(profile_path: Path = PROFILE_JSON, root: Optional[Path] = None,
             workflow_file: Path = WORKFLOW_FILE) -> ValidationReport:
    """Run every check. Raises ProfileNotFound/MalformedInput if the record cannot be read."""
    root = Path(root) if root is not None else Path.cwd()
    profile_path = Path(profile_path)
    if not profile_path.is_absolute():
        profile_path = root / profile_path

    record = load_profile(profile_path)
    report = ValidationReport()
    report.passed(f"Valid JSON format: {profile_path}")

    check_fields(record, report)
    check_formats(record, report)
    check_lists(record, report)
    check_skills(record, report)
    check_referenced_files(record, report, root)
    check_workflow(report, root, workflow_file)
    return report


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def print_summary(report: ValidationReport):
    log.info("=" * 50)
    log.info("Validation Summary")
    log.info(f"  Checks performed: {len(report.checks)}")
    log.info(f"  Errors:           {len(report.errors)}")
    log.info(f"  Warnings:         {len(report.warnings)}")
    log.info("=" * 50)

    if report.ok:
        log.info("✅ VALIDATION SUCCESSFUL — your profile is ready for deployment!")
        log.info("Next step: run deploy-pages")
        if report.warnings:
            log.info(f"There are {len(report.warnings)} warnings - review them above. "
                     "Warnings won't prevent deployment but should be addressed.")
    else:
        log.error(f"❌ VALIDATION FAILED — found {len(report.errors)} error(s) "
                  "that must be fixed before deployment")
        log.info("Fix the errors above and run this script again")


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        description=f"Validate {PROFILE_JSON} before deploying the portfolio site")
    parser.parse_args(argv)
    setup_logging()

    log.info(f"Validating {PROFILE_JSON}...")
    try:
        report = validate(PROFILE_JSON)
    except DeployError as e:
        log.error(f"✗ {e.message}")
        for hint in e.hints:
            log.error(f"  {hint}")
        return 1

    print_summary(report)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
