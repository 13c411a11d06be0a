"""The closed set of webhook event kinds the bot understands."""

from __future__ import annotations

import enum


class EventKind(enum.StrEnum):
    """Webhook event kinds, valued by their ``X-GitHub-Event`` discriminator."""

    CHECK_RUN = "check_run"
    CHECK_SUITE = "check_suite"
    COMMIT_COMMENT = "commit_comment"
    CREATE = "create"
    DELETE = "delete"
    DEPLOY_KEY = "deploy_key"
    DEPLOYMENT = "deployment"
    DEPLOYMENT_STATUS = "deployment_status"
    FORK = "fork"
    GITHUB_APP_AUTHORIZATION = "github_app_authorization"
    GOLLUM = "gollum"
    INSTALLATION = "installation"
    INSTALLATION_REPOSITORIES = "installation_repositories"
    ISSUE_COMMENT = "issue_comment"
    ISSUES = "issues"
    LABEL = "label"
    MARKETPLACE_PURCHASE = "marketplace_purchase"
    MEMBER = "member"
    MEMBERSHIP = "membership"
    META = "meta"
    MILESTONE = "milestone"
    ORG_BLOCK = "org_block"
    ORGANIZATION = "organization"
    PAGE_BUILD = "page_build"
    PING = "ping"
    PROJECT = "project"
    PROJECT_CARD = "project_card"
    PROJECT_COLUMN = "project_column"
    PUBLIC = "public"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    PUSH = "push"
    RELEASE = "release"
    REPOSITORY = "repository"
    REPOSITORY_VULNERABILITY_ALERT = "repository_vulnerability_alert"
    STAR = "star"
    STATUS = "status"
    TEAM = "team"
    TEAM_ADD = "team_add"
    WATCH = "watch"


def parse_event_kind(discriminator: str | None) -> EventKind | None:
    """Return the kind named by ``discriminator``, or ``None`` if unknown."""
    if discriminator is None:
        return None
    try:
        return EventKind(discriminator)
    except ValueError:
        return None


__all__ = ["EventKind", "parse_event_kind"]
