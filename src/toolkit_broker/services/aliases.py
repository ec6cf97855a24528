# Alias resolver
# Maps short or legacy tool names (and their argument shapes) to canonical tools

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import TypeAdapter, ValidationError

from ..models.alias import (
    AliasMatch,
    AliasMetadata,
    ParameterTransform,
    RenameKeyTransform,
    SetDefaultTransform,
)
from .errors import AliasConfigurationError

logger = logging.getLogger(__name__)

_transform_adapter: TypeAdapter[ParameterTransform] = TypeAdapter(ParameterTransform)

# Fields searched by search_by_intent, highest priority first
INTENT_FIELDS = ("intent", "tags", "description")


DEFAULT_TOOL_ALIASES: dict[str, str] = {
    # dashed names used by the vendored runtime
    "github-list-repos": "github_list_repos",
    "github-create-issue": "github_create_issue",
    "vercel-list-projects": "vercel_list_projects",
    "neon-list-projects": "neon_list_projects",
    "openai-list-models": "openai_list_models",
    # short names
    "list_repos": "github_list_repos",
    "list_org_repos": "github_list_org_repos",
    "create_issue": "github_create_issue",
    "create_repo": "github_create_repo",
    "list_projects": "vercel_list_projects",
    "list_deployments": "vercel_list_deployments",
    "send_email": "resend_send_email",
    "send_sms": "twilio_send_sms",
    "send_gmail": "gmail_send_message",
    "create_customer": "stripe_customer_create",
    "list_models": "openai_list_models",
}

DEFAULT_PARAMETER_TRANSFORMS: dict[str, ParameterTransform] = {
    "list_org_repos": RenameKeyTransform(from_key="owner", to_key="org"),
    "list_repos": SetDefaultTransform(key="per_page", value=30),
    "send_gmail": RenameKeyTransform(from_key="recipient", to_key="to"),
}

DEFAULT_ALIAS_METADATA: dict[str, AliasMetadata] = {
    "list_repos": AliasMetadata(
        alias="list_repos",
        intent="list repositories",
        tags=["github", "repos", "code"],
        description="List repositories for the authenticated user",
    ),
    "list_org_repos": AliasMetadata(
        alias="list_org_repos",
        intent="list organization repositories",
        tags=["github", "org", "repos"],
        description="List repositories owned by an organization",
    ),
    "create_issue": AliasMetadata(
        alias="create_issue",
        intent="open an issue",
        tags=["github", "issues", "bug"],
        description="Create an issue in a GitHub repository",
    ),
    "list_projects": AliasMetadata(
        alias="list_projects",
        intent="list deployment projects",
        tags=["vercel", "projects", "hosting"],
        description="List Vercel projects",
    ),
    "send_email": AliasMetadata(
        alias="send_email",
        intent="send an email",
        tags=["email", "resend", "notify"],
        description="Send a transactional email through Resend",
    ),
    "send_sms": AliasMetadata(
        alias="send_sms",
        intent="send a text message",
        tags=["sms", "twilio", "notify"],
        description="Send an SMS through Twilio",
    ),
    "create_customer": AliasMetadata(
        alias="create_customer",
        intent="create a billing customer",
        tags=["stripe", "billing", "payments"],
        description="Create a Stripe customer record",
    ),
}


class AliasResolver:
    """Resolves aliases to canonical tool names and remaps their arguments."""

    def __init__(
        self,
        aliases: Mapping[str, str] | None = None,
        transforms: Mapping[str, ParameterTransform] | None = None,
        metadata: Mapping[str, AliasMetadata] | None = None,
    ) -> None:
        raw = dict(DEFAULT_TOOL_ALIASES if aliases is None else aliases)
        self._transforms: dict[str, ParameterTransform] = dict(
            DEFAULT_PARAMETER_TRANSFORMS if transforms is None else transforms
        )
        self._metadata: dict[str, AliasMetadata] = dict(
            DEFAULT_ALIAS_METADATA if metadata is None else metadata
        )
        self._aliases, self._chains = self._flatten(raw)

    @staticmethod
    def _flatten(raw: Mapping[str, str]) -> tuple[dict[str, str], dict[str, list[str]]]:
        """Follow alias chains so every entry points at a non-alias name.

        Also returns, per alias, the names passed through on the way.
        """
        # self-mapped entries are no-ops, not cycles
        raw = {k: v for k, v in raw.items() if k != v}
        flat: dict[str, str] = {}
        chains: dict[str, list[str]] = {}
        for alias in raw:
            seen = [alias]
            target = raw[alias]
            while target in raw:
                if target in seen:
                    raise AliasConfigurationError(
                        f"Alias cycle detected: {' -> '.join(seen + [target])}",
                        {"alias": alias, "chain": seen + [target]},
                    )
                seen.append(target)
                target = raw[target]
            flat[alias] = target
            chains[alias] = seen
        return flat, chains

    def resolve_tool_name(self, name: str) -> str:
        """Canonical name for `name`, or `name` itself when it is not an alias."""
        return self._aliases.get(name, name)

    def map_parameters(self, name: str, args: Mapping[str, Any] | None) -> dict[str, Any]:
        """Apply the transforms registered along the alias chain starting at `name`.

        The name the caller used goes first, then each intermediate alias.
        """
        args = dict(args or {})
        for step in self._chains.get(name, [name]):
            transform = self._transforms.get(step)
            if transform is not None:
                args = transform.apply(args)
        return args

    def resolve(self, name: str, args: Mapping[str, Any] | None) -> tuple[str, dict[str, Any]]:
        """Translate name and arguments together."""
        return self.resolve_tool_name(name), self.map_parameters(name, args)

    def is_alias(self, name: str) -> bool:
        return name in self._aliases

    def get_all_aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def describe(self) -> list[dict[str, Any]]:
        """Aliases with their serialized transforms, sorted by alias."""
        entries = []
        for alias in sorted(self._aliases):
            transform = self._transforms.get(alias)
            entries.append({
                "alias": alias,
                "tool_name": self._aliases[alias],
                "transform": transform.model_dump(mode="json", by_alias=True) if transform else None,
            })
        return entries

    def search_by_intent(self, query: str, limit: int = 10) -> list[AliasMatch]:
        """Substring search over curated alias metadata.

        Each query term scores once, for the first of intent, tags or
        description that contains it.
        """
        terms = list(dict.fromkeys(query.strip().lower().split()))
        if not terms:
            return []

        matches: list[AliasMatch] = []
        for alias, meta in self._metadata.items():
            fields = {
                "intent": meta.intent.lower(),
                "tags": " ".join(meta.tags).lower(),
                "description": meta.description.lower(),
            }
            score = 0
            matched: list[str] = []
            for term in terms:
                for field in INTENT_FIELDS:
                    if term in fields[field]:
                        score += 1
                        if field not in matched:
                            matched.append(field)
                        break
            if score > 0:
                matches.append(AliasMatch(
                    alias=alias,
                    tool_name=self.resolve_tool_name(alias),
                    score=score,
                    matched=matched,
                    metadata=meta,
                ))

        matches.sort(key=lambda m: (-m.score, m.alias))
        return matches[:limit]

    @classmethod
    def from_file(cls, path: str | Path) -> "AliasResolver":
        """Build a resolver from the defaults plus a YAML/JSON alias file."""
        data = load_alias_file(path)
        aliases = {**DEFAULT_TOOL_ALIASES, **data["aliases"]}
        transforms = {**DEFAULT_PARAMETER_TRANSFORMS, **data["transforms"]}
        metadata = {**DEFAULT_ALIAS_METADATA, **data["metadata"]}
        return cls(aliases=aliases, transforms=transforms, metadata=metadata)


def load_alias_file(path: str | Path) -> dict[str, dict[str, Any]]:
    """Parse an alias file into aliases, transforms and metadata tables."""
    alias_path = Path(path)
    try:
        raw_content = alias_path.read_text(encoding="utf-8")
        if alias_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw_content) or {}
        else:
            data = json.loads(raw_content)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error(f"Failed to read alias file {alias_path}: {e}")
        raise AliasConfigurationError(f"Invalid alias file {alias_path}: {e}") from e

    if not isinstance(data, dict):
        raise AliasConfigurationError(f"Alias file {alias_path} must contain a mapping")

    aliases = data.get("aliases") or {}
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in aliases.items()):
        raise AliasConfigurationError(f"Alias file {alias_path}: aliases must map strings to strings")

    try:
        transforms = {
            name: _transform_adapter.validate_python(entry)
            for name, entry in (data.get("transforms") or {}).items()
        }
        metadata = {
            name: AliasMetadata(alias=name, **entry)
            for name, entry in (data.get("metadata") or {}).items()
        }
    except (ValidationError, TypeError) as e:
        raise AliasConfigurationError(f"Alias file {alias_path}: {e}") from e

    logger.info(f"Loaded {len(aliases)} aliases from {alias_path}")
    return {"aliases": aliases, "transforms": transforms, "metadata": metadata}
