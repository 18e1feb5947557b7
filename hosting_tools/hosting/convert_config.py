"""Compile a user hosting config into the hosting API's serving config.

The user config is the ``hosting`` object of a project file::

    {
        "rewrites": [{"source": "**", "destination": "/index.html"}],
        "redirects": [{"source": "/old", "destination": "/new", "type": 301}],
        "headers": [{"source": "**/*.js", "headers": [{"key": "Cache-Control", "value": "max-age=60"}]}],
        "cleanUrls": true,
        "trailingSlash": false
    }

Compilation is pure: it validates every rule, resolves its single match
pattern, and picks the rule variant once, at construction time. Rule order
is preserved because the backend evaluates rules first-match-wins.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import ValidationError

from hosting_tools.core.errors import (
    ConflictingPatternError,
    HostingConfigError,
    InvalidRedirectError,
    MissingPatternError,
    UnknownRewriteError,
)
from hosting_tools.core.types import (
    DEFAULT_RUN_REGION,
    CloudRunRewrite,
    CloudRunTarget,
    DynamicLinksRewrite,
    FunctionRewrite,
    HeaderRule,
    MatchPattern,
    PathRewrite,
    RedirectRule,
    ServingConfig,
    TrailingSlashBehavior,
)

RuleKind = Literal["rewrite", "redirect", "header"]


def extract_pattern(kind: RuleKind, rule: Mapping[str, Any]) -> MatchPattern:
    """Extract exactly one glob or regex from a rule.

    ``source`` is accepted as a synonym for ``glob``. The pattern string is
    returned unmodified; matching semantics belong to the backend.

    Args:
        kind: Rule kind, used in error messages
        rule: Raw rule object from the user config

    Returns:
        The rule's match pattern

    Raises:
        ConflictingPatternError: If both a glob and a regex are given
        MissingPatternError: If neither is given
    """
    if not isinstance(rule, Mapping):
        raise MissingPatternError(kind)

    glob = rule.get("source") or rule.get("glob")
    regex = rule.get("regex")

    if glob and regex:
        raise ConflictingPatternError(kind)
    if glob:
        return MatchPattern(glob=glob)
    if regex:
        return MatchPattern(regex=regex)
    raise MissingPatternError(kind)


def _convert_rewrite(
    rule: Mapping[str, Any],
) -> PathRewrite | FunctionRewrite | DynamicLinksRewrite | CloudRunRewrite:
    pattern = extract_pattern("rewrite", rule)

    if rule.get("destination"):
        return PathRewrite(pattern=pattern, path=rule["destination"])
    if rule.get("function"):
        return FunctionRewrite(pattern=pattern, function=rule["function"])
    if rule.get("dynamicLinks"):
        return DynamicLinksRewrite(pattern=pattern, dynamic_links=rule["dynamicLinks"])
    if rule.get("run"):
        run = rule["run"]
        if not isinstance(run, Mapping):
            raise UnknownRewriteError(dict(rule))
        # The backend requires an explicit region
        target = CloudRunTarget(
            service_id=run.get("serviceId"),
            region=run.get("region") or DEFAULT_RUN_REGION,
        )
        return CloudRunRewrite(pattern=pattern, run=target)

    raise UnknownRewriteError(dict(rule))


def _convert_redirect(rule: Mapping[str, Any]) -> RedirectRule:
    pattern = extract_pattern("redirect", rule)
    fields: dict[str, Any] = {
        "pattern": pattern,
        "location": rule.get("destination") or "",
    }

    status_code = rule.get("type")
    if status_code:
        # JSON numbers such as 301.0 are accepted
        if isinstance(status_code, float) and status_code.is_integer():
            status_code = int(status_code)
        if isinstance(status_code, bool) or not isinstance(status_code, int):
            raise InvalidRedirectError(status_code)
        if not 300 <= status_code <= 399:
            raise InvalidRedirectError(status_code)
        fields["status_code"] = status_code

    return RedirectRule(**fields)


def _convert_header(rule: Mapping[str, Any]) -> HeaderRule:
    pattern = extract_pattern("header", rule)

    headers: dict[str, str] = {}
    for pair in rule.get("headers") or []:
        if not isinstance(pair, Mapping) or "key" not in pair or "value" not in pair:
            raise HostingConfigError(
                f"Header entries must have a key and a value, got {pair!r}"
            )
        headers[pair["key"]] = pair["value"]

    return HeaderRule(pattern=pattern, headers=headers)


def convert_config(config: Mapping[str, Any] | None) -> ServingConfig:
    """Compile a user hosting config into a ``ServingConfig``.

    Args:
        config: The ``hosting`` object of a project file, or None

    Returns:
        The compiled serving config; only keys present in the input are set

    Raises:
        HostingConfigError: If any rule or value is invalid
    """
    if not config:
        return ServingConfig()

    try:
        return _convert(config)
    except ValidationError as e:
        raise HostingConfigError(f"Invalid hosting config: {e}") from e


def _convert(config: Mapping[str, Any]) -> ServingConfig:
    fields: dict[str, Any] = {}

    rewrites = config.get("rewrites")
    if isinstance(rewrites, list):
        fields["rewrites"] = [_convert_rewrite(rule) for rule in rewrites]

    redirects = config.get("redirects")
    if isinstance(redirects, list):
        fields["redirects"] = [_convert_redirect(rule) for rule in redirects]

    headers = config.get("headers")
    if isinstance(headers, list):
        fields["headers"] = [_convert_header(rule) for rule in headers]

    # Presence, not value, decides whether these are sent
    if "cleanUrls" in config:
        fields["clean_urls"] = config["cleanUrls"]

    trailing_slash = config.get("trailingSlash")
    if trailing_slash is True:
        fields["trailing_slash_behavior"] = TrailingSlashBehavior.ADD
    elif trailing_slash is False:
        fields["trailing_slash_behavior"] = TrailingSlashBehavior.REMOVE

    if "appAssociation" in config:
        fields["app_association"] = config["appAssociation"]

    if "i18n" in config:
        fields["i18n"] = config["i18n"]

    return ServingConfig(**fields)
