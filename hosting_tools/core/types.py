"""Core type definitions for hosting_tools.

Rule models mirror the hosting REST API. Every rule owns exactly one
``MatchPattern``; on the wire the pattern keys are flattened into the rule
object, which is what ``to_api``/``from_api`` translate.

Versions, releases and channels are owned by the backend. The models here are
frozen snapshots of a response and are never mutated locally.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hosting_tools.core.utils import resource_id, site_from_name, strip_scheme

DEFAULT_RUN_REGION = "us-central1"

_API_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)

_RESOURCE_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="allow",
)


class TrailingSlashBehavior(StrEnum):
    """How a trailing slash in the request path is handled."""
    TRAILING_SLASH_BEHAVIOR_UNSPECIFIED = "TRAILING_SLASH_BEHAVIOR_UNSPECIFIED"
    ADD = "ADD"
    REMOVE = "REMOVE"


class AppAssociationBehavior(StrEnum):
    """How mobile app association files are served."""
    AUTO = "AUTO"
    NONE = "NONE"


class ReleaseType(StrEnum):
    """Reason a release was created."""
    TYPE_UNSPECIFIED = "TYPE_UNSPECIFIED"
    DEPLOY = "DEPLOY"
    ROLLBACK = "ROLLBACK"
    SITE_DISABLE = "SITE_DISABLE"


class VersionStatus(StrEnum):
    """Deploy status of a version."""
    VERSION_STATUS_UNSPECIFIED = "VERSION_STATUS_UNSPECIFIED"
    CREATED = "CREATED"
    FINALIZED = "FINALIZED"
    DELETED = "DELETED"
    ABANDONED = "ABANDONED"
    EXPIRED = "EXPIRED"
    CLONING = "CLONING"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self in _TERMINAL_STATUSES

    def can_transition_to(self, target: VersionStatus) -> bool:
        """Check whether the lifecycle allows moving to ``target``."""
        return target in _VERSION_TRANSITIONS.get(self, frozenset())


_VERSION_TRANSITIONS: dict[VersionStatus, frozenset[VersionStatus]] = {
    VersionStatus.CLONING: frozenset({VersionStatus.CREATED}),
    VersionStatus.CREATED: frozenset(
        {VersionStatus.FINALIZED, VersionStatus.DELETED, VersionStatus.ABANDONED}
    ),
    VersionStatus.FINALIZED: frozenset({VersionStatus.DELETED, VersionStatus.EXPIRED}),
}

_TERMINAL_STATUSES = frozenset(
    {VersionStatus.DELETED, VersionStatus.ABANDONED, VersionStatus.EXPIRED}
)


class MatchPattern(BaseModel):
    """A URL matcher: exactly one of a glob or an RE2 regex."""

    model_config = ConfigDict(frozen=True)

    glob: str | None = None
    regex: str | None = None

    @model_validator(mode="after")
    def validate_exactly_one(self) -> MatchPattern:
        if (self.glob is None) == (self.regex is None):
            raise ValueError("Exactly one of glob or regex must be set")
        return self

    def to_api(self) -> dict[str, str]:
        """Wire form of the pattern."""
        if self.glob is not None:
            return {"glob": self.glob}
        return {"regex": self.regex or ""}

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> MatchPattern:
        """Read the pattern keys out of a flattened rule object."""
        return cls(glob=data.get("glob"), regex=data.get("regex"))


class _Rule(BaseModel):
    model_config = _API_MODEL_CONFIG

    pattern: MatchPattern

    def _api_fields(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_api(self) -> dict[str, Any]:
        """Flatten the rule into the shape accepted by the hosting API."""
        return {**self.pattern.to_api(), **self._api_fields()}

    @classmethod
    def from_api(cls, data: dict[str, Any]):
        fields = {k: v for k, v in data.items() if k not in ("glob", "regex")}
        fields["pattern"] = MatchPattern.from_api(data)
        return cls.model_validate(fields)


class HeaderRule(_Rule):
    """Custom response headers applied to matching paths."""

    headers: dict[str, str] = Field(default_factory=dict)

    def _api_fields(self) -> dict[str, Any]:
        return {"headers": dict(self.headers)}


class RedirectRule(_Rule):
    """Redirect matching paths to ``location``."""

    location: str = ""
    status_code: int | None = None

    @field_validator("status_code")
    @classmethod
    def validate_status_code(cls, v: int | None) -> int | None:
        """Validate the redirect status code."""
        if v is not None and not 300 <= v <= 399:
            raise ValueError(f"Redirect status code must be 3xx, got {v}")
        return v

    def _api_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {"location": self.location}
        if self.status_code is not None:
            fields["statusCode"] = self.status_code
        return fields


class CloudRunTarget(BaseModel):
    """A Cloud Run service that receives rewritten requests."""

    model_config = _API_MODEL_CONFIG

    service_id: str
    region: str = DEFAULT_RUN_REGION


class PathRewrite(_Rule):
    kind: Literal["path"] = "path"
    path: str

    def _api_fields(self) -> dict[str, Any]:
        return {"path": self.path}


class FunctionRewrite(_Rule):
    kind: Literal["function"] = "function"
    function: str

    def _api_fields(self) -> dict[str, Any]:
        return {"function": self.function}


class DynamicLinksRewrite(_Rule):
    kind: Literal["dynamic_links"] = "dynamic_links"
    dynamic_links: bool = True

    def _api_fields(self) -> dict[str, Any]:
        return {"dynamicLinks": self.dynamic_links}


class CloudRunRewrite(_Rule):
    kind: Literal["run"] = "run"
    run: CloudRunTarget

    def _api_fields(self) -> dict[str, Any]:
        return {"run": self.run.model_dump(by_alias=True)}


Rewrite = Annotated[
    PathRewrite | FunctionRewrite | DynamicLinksRewrite | CloudRunRewrite,
    Field(discriminator="kind"),
]


def rewrite_from_api(data: dict[str, Any]) -> PathRewrite | FunctionRewrite | DynamicLinksRewrite | CloudRunRewrite:
    """Parse a rewrite returned by the hosting API into its variant."""
    if "path" in data:
        return PathRewrite.from_api(data)
    if "function" in data:
        return FunctionRewrite.from_api(data)
    if "dynamicLinks" in data:
        return DynamicLinksRewrite.from_api(data)
    if "run" in data:
        return CloudRunRewrite.from_api(data)
    raise ValueError(f"Unrecognized rewrite: {data}")


class I18nConfig(BaseModel):
    """Root of country and language specific content."""

    model_config = ConfigDict(frozen=True, extra="allow")

    root: str


class ServingConfig(BaseModel):
    """Routing and serving behavior of a version.

    Only fields that were explicitly set are sent to the backend, so an
    empty ``ServingConfig()`` serializes to ``{}``.
    """

    model_config = _API_MODEL_CONFIG

    headers: list[HeaderRule] | None = None
    redirects: list[RedirectRule] | None = None
    rewrites: list[Rewrite] | None = None
    clean_urls: bool | None = None
    trailing_slash_behavior: TrailingSlashBehavior | None = None
    app_association: AppAssociationBehavior | None = None
    # to_camel would produce "i18N"
    i18n: I18nConfig | None = Field(default=None, alias="i18n")

    def to_api(self) -> dict[str, Any]:
        """Serialize the explicitly set fields in API form."""
        body: dict[str, Any] = {}
        for name, field_info in type(self).model_fields.items():
            if name not in self.model_fields_set:
                continue
            value = getattr(self, name)
            key = field_info.alias or to_camel(name)
            if isinstance(value, list):
                body[key] = [rule.to_api() for rule in value]
            elif isinstance(value, BaseModel):
                body[key] = value.model_dump(by_alias=True)
            elif isinstance(value, StrEnum):
                body[key] = value.value
            else:
                body[key] = value
        return body

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> ServingConfig:
        """Parse a serving config returned by the hosting API."""
        data = data or {}
        fields: dict[str, Any] = {}
        if "headers" in data:
            fields["headers"] = [HeaderRule.from_api(h) for h in data["headers"] or []]
        if "redirects" in data:
            fields["redirects"] = [RedirectRule.from_api(r) for r in data["redirects"] or []]
        if "rewrites" in data:
            fields["rewrites"] = [rewrite_from_api(r) for r in data["rewrites"] or []]
        for key in ("cleanUrls", "trailingSlashBehavior", "appAssociation", "i18n"):
            if key in data:
                fields[key] = data[key]
        return cls.model_validate(fields)


class ActingUser(BaseModel):
    """User who performed an action on a resource."""

    model_config = _RESOURCE_MODEL_CONFIG

    email: str = ""
    image_url: str | None = None


class Version(BaseModel):
    """Snapshot of a version resource (``sites/{site}/versions/{id}``)."""

    model_config = _RESOURCE_MODEL_CONFIG

    name: str
    status: VersionStatus = VersionStatus.VERSION_STATUS_UNSPECIFIED
    config: ServingConfig | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    create_time: datetime | None = None
    create_user: ActingUser | None = None
    finalize_time: datetime | None = None
    finalize_user: ActingUser | None = None
    delete_time: datetime | None = None
    delete_user: ActingUser | None = None
    file_count: int = 0
    version_bytes: int = 0

    @field_validator("config", mode="before")
    @classmethod
    def parse_config(cls, v: Any) -> Any:
        """Accept the flattened wire form of the serving config."""
        if isinstance(v, dict):
            return ServingConfig.from_api(v)
        return v

    @property
    def site(self) -> str:
        return site_from_name(self.name)

    @property
    def version_id(self) -> str:
        return resource_id(self.name)


class Release(BaseModel):
    """Immutable binding of a channel to a version."""

    model_config = _RESOURCE_MODEL_CONFIG

    name: str
    version: Version | None = None
    type: ReleaseType = ReleaseType.TYPE_UNSPECIFIED
    release_time: datetime | None = None
    release_user: ActingUser | None = None
    message: str = ""


class Channel(BaseModel):
    """Snapshot of a channel resource (``sites/{site}/channels/{id}``)."""

    model_config = _RESOURCE_MODEL_CONFIG

    name: str
    url: str = ""
    release: Release | None = None
    create_time: datetime | None = None
    update_time: datetime | None = None
    expire_time: datetime | None = None
    retained_release_count: int = Field(default=10, ge=1, le=100)
    labels: dict[str, str] = Field(default_factory=dict)

    @property
    def site(self) -> str:
        return site_from_name(self.name)

    @property
    def channel_id(self) -> str:
        return resource_id(self.name)

    @property
    def domain(self) -> str:
        """Channel URL without its scheme."""
        return strip_scheme(self.url)


class LongRunningOperation(BaseModel):
    """A backend operation that completes asynchronously."""

    model_config = _RESOURCE_MODEL_CONFIG

    name: str
    done: bool = False
    metadata: Any = None
    response: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
