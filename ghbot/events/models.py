"""Typed webhook event variants.

Every variant is a frozen ``msgspec.Struct`` tagged with the
:class:`~ghbot.events.kinds.EventKind` it decodes from. Only the fields the
bot or typical hooks read are typed; unknown keys are ignored by msgspec and
the complete JSON object stays available as ``payload``.

``trigger_fields`` lists which of the sender, organisation, and repository a
variant reports in its trigger log line.
"""

from __future__ import annotations

import enum
import typing as typ
from typing import ClassVar

import msgspec

from .kinds import EventKind

if typ.TYPE_CHECKING:
    import collections.abc as cabc

JSONObject = dict[str, typ.Any]


class TriggerField(enum.StrEnum):
    """Delivery attributes that may appear in a trigger log line."""

    SENDER = "sender"
    ORG = "org"
    REPO = "repo"


_SOR = frozenset({TriggerField.SENDER, TriggerField.ORG, TriggerField.REPO})
_SR = frozenset({TriggerField.SENDER, TriggerField.REPO})
_SO = frozenset({TriggerField.SENDER, TriggerField.ORG})
_OR = frozenset({TriggerField.ORG, TriggerField.REPO})
_S = frozenset({TriggerField.SENDER})
_NONE: frozenset[TriggerField] = frozenset()


class Actor(msgspec.Struct, frozen=True, kw_only=True):
    """A user, bot, or organisation account."""

    login: str | None = None
    id: int | None = None
    type: str | None = None


class Organization(msgspec.Struct, frozen=True, kw_only=True):
    """The organisation a delivery belongs to."""

    login: str | None = None
    id: int | None = None
    name: str | None = None


class RepositoryRef(msgspec.Struct, frozen=True, kw_only=True):
    """The repository a delivery belongs to."""

    name: str | None = None
    full_name: str | None = None
    id: int | None = None
    private: bool | None = None
    default_branch: str | None = None
    owner: Actor | None = None


class InstallationRef(msgspec.Struct, frozen=True, kw_only=True):
    """The GitHub App installation that received the delivery."""

    id: int | None = None


class WebhookEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Fields shared by every webhook delivery."""

    kind: ClassVar[EventKind]
    trigger_fields: ClassVar[frozenset[TriggerField]] = _NONE

    action: str | None = None
    sender: Actor | None = None
    organization: Organization | None = None
    repository: RepositoryRef | None = None
    installation: InstallationRef | None = None
    payload: JSONObject = msgspec.field(
        default_factory=dict, name="__ghbot_payload__"
    )

    @property
    def sender_login(self) -> str | None:
        """Return the sending account's login when present."""
        return self.sender.login if self.sender is not None else None

    @property
    def org_login(self) -> str | None:
        """Return the organisation login, falling back to its display name."""
        if self.organization is None:
            return None
        return self.organization.login or self.organization.name

    @property
    def repo_name(self) -> str | None:
        """Return the repository name when present."""
        return self.repository.name if self.repository is not None else None


class CheckRunEvent(WebhookEvent):
    """A check run was created, completed, or re-requested."""

    kind = EventKind.CHECK_RUN
    trigger_fields = _SOR

    check_run: JSONObject | None = None
    requested_action: JSONObject | None = None


class CheckSuiteEvent(WebhookEvent):
    """A check suite changed state."""

    kind = EventKind.CHECK_SUITE
    trigger_fields = _SOR

    check_suite: JSONObject | None = None


class CommitCommentEvent(WebhookEvent):
    """A commit comment was created."""

    kind = EventKind.COMMIT_COMMENT
    trigger_fields = _SR

    comment: JSONObject | None = None


class CreateEvent(WebhookEvent):
    """A branch or tag was created."""

    kind = EventKind.CREATE
    trigger_fields = _SR

    ref: str | None = None
    ref_type: str | None = None
    master_branch: str | None = None
    description: str | None = None
    pusher_type: str | None = None


class DeleteEvent(WebhookEvent):
    """A branch or tag was deleted."""

    kind = EventKind.DELETE
    trigger_fields = _SR

    ref: str | None = None
    ref_type: str | None = None
    pusher_type: str | None = None


class DeployKeyEvent(WebhookEvent):
    """A deploy key was added or removed."""

    kind = EventKind.DEPLOY_KEY

    key: JSONObject | None = None


class DeploymentEvent(WebhookEvent):
    """A deployment was created."""

    kind = EventKind.DEPLOYMENT
    trigger_fields = _SR

    deployment: JSONObject | None = None


class DeploymentStatusEvent(WebhookEvent):
    """A deployment status was created."""

    kind = EventKind.DEPLOYMENT_STATUS
    trigger_fields = _SR

    deployment_status: JSONObject | None = None
    deployment: JSONObject | None = None


class ForkEvent(WebhookEvent):
    """A repository was forked."""

    kind = EventKind.FORK
    trigger_fields = _SR

    forkee: RepositoryRef | None = None


class GitHubAppAuthorizationEvent(WebhookEvent):
    """A user revoked their authorisation of a GitHub App."""

    kind = EventKind.GITHUB_APP_AUTHORIZATION
    trigger_fields = _S


class GollumEvent(WebhookEvent):
    """Wiki pages were created or updated."""

    kind = EventKind.GOLLUM
    trigger_fields = _SR

    pages: list[JSONObject] = msgspec.field(default_factory=list)


class InstallationEvent(WebhookEvent):
    """A GitHub App was installed, uninstalled, or changed."""

    kind = EventKind.INSTALLATION
    trigger_fields = _S

    repositories: list[RepositoryRef] = msgspec.field(default_factory=list)


class InstallationRepositoriesEvent(WebhookEvent):
    """Repositories were added to or removed from an installation."""

    kind = EventKind.INSTALLATION_REPOSITORIES
    trigger_fields = _S

    repository_selection: str | None = None
    repositories_added: list[RepositoryRef] = msgspec.field(default_factory=list)
    repositories_removed: list[RepositoryRef] = msgspec.field(default_factory=list)


class IssueCommentEvent(WebhookEvent):
    """An issue or pull request comment changed."""

    kind = EventKind.ISSUE_COMMENT
    trigger_fields = _SR

    issue: JSONObject | None = None
    comment: JSONObject | None = None
    changes: JSONObject | None = None


class IssuesEvent(WebhookEvent):
    """An issue changed."""

    kind = EventKind.ISSUES
    trigger_fields = _SR

    issue: JSONObject | None = None
    changes: JSONObject | None = None
    label: JSONObject | None = None
    assignee: Actor | None = None


class LabelEvent(WebhookEvent):
    """A repository label changed."""

    kind = EventKind.LABEL
    trigger_fields = _OR

    label: JSONObject | None = None
    changes: JSONObject | None = None


class MarketplacePurchaseEvent(WebhookEvent):
    """A Marketplace plan was purchased, changed, or cancelled."""

    kind = EventKind.MARKETPLACE_PURCHASE
    trigger_fields = _S

    effective_date: str | None = None
    marketplace_purchase: JSONObject | None = None
    previous_marketplace_purchase: JSONObject | None = None


class MemberEvent(WebhookEvent):
    """A collaborator was added to or removed from a repository."""

    kind = EventKind.MEMBER
    trigger_fields = _SR

    member: Actor | None = None
    changes: JSONObject | None = None


class MembershipEvent(WebhookEvent):
    """A user was added to or removed from a team."""

    kind = EventKind.MEMBERSHIP
    trigger_fields = _SO

    scope: str | None = None
    member: Actor | None = None
    team: JSONObject | None = None


class MetaEvent(WebhookEvent):
    """The webhook itself was deleted."""

    kind = EventKind.META

    hook_id: int | None = None
    hook: JSONObject | None = None


class MilestoneEvent(WebhookEvent):
    """A milestone changed."""

    kind = EventKind.MILESTONE
    trigger_fields = _SOR

    milestone: JSONObject | None = None
    changes: JSONObject | None = None


class OrgBlockEvent(WebhookEvent):
    """An organisation blocked or unblocked a user."""

    kind = EventKind.ORG_BLOCK
    trigger_fields = _S

    blocked_user: Actor | None = None


class OrganizationEvent(WebhookEvent):
    """Organisation membership or the organisation itself changed."""

    kind = EventKind.ORGANIZATION
    trigger_fields = _S

    membership: JSONObject | None = None
    invitation: JSONObject | None = None


class PageBuildEvent(WebhookEvent):
    """A GitHub Pages build finished."""

    kind = EventKind.PAGE_BUILD
    trigger_fields = _SR

    id: int | None = None
    build: JSONObject | None = None


class PingEvent(WebhookEvent):
    """Sent once when a webhook is configured."""

    kind = EventKind.PING

    zen: str | None = None
    hook_id: int | None = None
    hook: JSONObject | None = None


class ProjectEvent(WebhookEvent):
    """A project board changed."""

    kind = EventKind.PROJECT
    trigger_fields = _SOR

    project: JSONObject | None = None
    changes: JSONObject | None = None


class ProjectCardEvent(WebhookEvent):
    """A project card changed."""

    kind = EventKind.PROJECT_CARD
    trigger_fields = _SOR

    project_card: JSONObject | None = None
    changes: JSONObject | None = None
    after_id: int | None = None


class ProjectColumnEvent(WebhookEvent):
    """A project column changed."""

    kind = EventKind.PROJECT_COLUMN
    trigger_fields = _SOR

    project_column: JSONObject | None = None
    changes: JSONObject | None = None
    after_id: int | None = None


class PublicEvent(WebhookEvent):
    """A private repository was made public."""

    kind = EventKind.PUBLIC
    trigger_fields = _SR


class PullRequestEvent(WebhookEvent):
    """A pull request changed."""

    kind = EventKind.PULL_REQUEST
    trigger_fields = _SR

    number: int | None = None
    pull_request: JSONObject | None = None
    changes: JSONObject | None = None
    label: JSONObject | None = None
    requested_reviewer: Actor | None = None
    before: str | None = None
    after: str | None = None


class PullRequestReviewEvent(WebhookEvent):
    """A pull request review was submitted, edited, or dismissed."""

    kind = EventKind.PULL_REQUEST_REVIEW
    trigger_fields = _SR

    review: JSONObject | None = None
    pull_request: JSONObject | None = None
    changes: JSONObject | None = None


class PullRequestReviewCommentEvent(WebhookEvent):
    """A comment on a pull request diff changed."""

    kind = EventKind.PULL_REQUEST_REVIEW_COMMENT
    trigger_fields = _SR

    comment: JSONObject | None = None
    pull_request: JSONObject | None = None
    changes: JSONObject | None = None


class PushEvent(WebhookEvent):
    """Commits were pushed to a branch or tag."""

    kind = EventKind.PUSH
    trigger_fields = _SR

    ref: str | None = None
    before: str | None = None
    after: str | None = None
    created: bool | None = None
    deleted: bool | None = None
    forced: bool | None = None
    base_ref: str | None = None
    compare: str | None = None
    commits: list[JSONObject] = msgspec.field(default_factory=list)
    head_commit: JSONObject | None = None
    pusher: JSONObject | None = None


class ReleaseEvent(WebhookEvent):
    """A release changed."""

    kind = EventKind.RELEASE
    trigger_fields = _SR

    release: JSONObject | None = None
    changes: JSONObject | None = None


class RepositoryEvent(WebhookEvent):
    """A repository was created, renamed, archived, or otherwise changed."""

    kind = EventKind.REPOSITORY
    trigger_fields = _SOR

    changes: JSONObject | None = None


class RepositoryVulnerabilityAlertEvent(WebhookEvent):
    """A vulnerability alert was raised or resolved."""

    kind = EventKind.REPOSITORY_VULNERABILITY_ALERT

    alert: JSONObject | None = None


class StarEvent(WebhookEvent):
    """A repository was starred or unstarred."""

    kind = EventKind.STAR

    starred_at: str | None = None


class StatusEvent(WebhookEvent):
    """A commit status changed."""

    kind = EventKind.STATUS
    trigger_fields = _SR

    id: int | None = None
    sha: str | None = None
    state: str | None = None
    context: str | None = None
    description: str | None = None
    target_url: str | None = None
    commit: JSONObject | None = None
    branches: list[JSONObject] = msgspec.field(default_factory=list)


class TeamEvent(WebhookEvent):
    """A team changed."""

    kind = EventKind.TEAM
    trigger_fields = _SOR

    team: JSONObject | None = None
    changes: JSONObject | None = None


class TeamAddEvent(WebhookEvent):
    """A repository was added to a team."""

    kind = EventKind.TEAM_ADD
    trigger_fields = _SOR

    team: JSONObject | None = None


class WatchEvent(WebhookEvent):
    """A user starred a repository (legacy watch semantics)."""

    kind = EventKind.WATCH
    trigger_fields = _SR


EVENT_TYPES: cabc.Mapping[EventKind, type[WebhookEvent]] = {
    variant.kind: variant
    for variant in (
        CheckRunEvent,
        CheckSuiteEvent,
        CommitCommentEvent,
        CreateEvent,
        DeleteEvent,
        DeployKeyEvent,
        DeploymentEvent,
        DeploymentStatusEvent,
        ForkEvent,
        GitHubAppAuthorizationEvent,
        GollumEvent,
        InstallationEvent,
        InstallationRepositoriesEvent,
        IssueCommentEvent,
        IssuesEvent,
        LabelEvent,
        MarketplacePurchaseEvent,
        MemberEvent,
        MembershipEvent,
        MetaEvent,
        MilestoneEvent,
        OrgBlockEvent,
        OrganizationEvent,
        PageBuildEvent,
        PingEvent,
        ProjectEvent,
        ProjectCardEvent,
        ProjectColumnEvent,
        PublicEvent,
        PullRequestEvent,
        PullRequestReviewEvent,
        PullRequestReviewCommentEvent,
        PushEvent,
        ReleaseEvent,
        RepositoryEvent,
        RepositoryVulnerabilityAlertEvent,
        StarEvent,
        StatusEvent,
        TeamEvent,
        TeamAddEvent,
        WatchEvent,
    )
}


def event_type_for(kind: EventKind) -> type[WebhookEvent]:
    """Return the struct that deliveries of ``kind`` decode into."""
    return EVENT_TYPES[kind]


__all__ = [
    "EVENT_TYPES",
    "Actor",
    "CheckRunEvent",
    "CheckSuiteEvent",
    "CommitCommentEvent",
    "CreateEvent",
    "DeleteEvent",
    "DeployKeyEvent",
    "DeploymentEvent",
    "DeploymentStatusEvent",
    "ForkEvent",
    "GitHubAppAuthorizationEvent",
    "GollumEvent",
    "InstallationEvent",
    "InstallationRef",
    "InstallationRepositoriesEvent",
    "IssueCommentEvent",
    "IssuesEvent",
    "JSONObject",
    "LabelEvent",
    "MarketplacePurchaseEvent",
    "MemberEvent",
    "MembershipEvent",
    "MetaEvent",
    "MilestoneEvent",
    "OrgBlockEvent",
    "Organization",
    "OrganizationEvent",
    "PageBuildEvent",
    "PingEvent",
    "ProjectCardEvent",
    "ProjectColumnEvent",
    "ProjectEvent",
    "PublicEvent",
    "PullRequestEvent",
    "PullRequestReviewCommentEvent",
    "PullRequestReviewEvent",
    "PushEvent",
    "ReleaseEvent",
    "RepositoryEvent",
    "RepositoryRef",
    "RepositoryVulnerabilityAlertEvent",
    "StarEvent",
    "StatusEvent",
    "TeamAddEvent",
    "TeamEvent",
    "TriggerField",
    "WatchEvent",
    "WebhookEvent",
    "event_type_for",
]
