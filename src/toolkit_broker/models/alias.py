"""Alias models: parameter transforms and curated intent metadata."""

from __future__ import annotations

from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class IdentityTransform(BaseModel):
    """Pass arguments through unchanged."""
    kind: Literal["identity"] = "identity"

    def apply(self, args: dict[str, Any]) -> dict[str, Any]:
        return dict(args)


class RenameKeyTransform(BaseModel):
    """Rename one argument key, leaving the value untouched."""
    kind: Literal["rename"] = "rename"
    from_key: str = Field(..., alias="from")
    to_key: str = Field(..., alias="to")

    model_config = ConfigDict(populate_by_name=True)

    def apply(self, args: dict[str, Any]) -> dict[str, Any]:
        if self.from_key not in args:
            return dict(args)
        result = {k: v for k, v in args.items() if k != self.from_key}
        # an explicit canonical key wins over the renamed legacy one
        result.setdefault(self.to_key, args[self.from_key])
        return result


class SetDefaultTransform(BaseModel):
    """Fill an argument when the caller omitted it."""
    kind: Literal["default"] = "default"
    key: str
    value: Any = None

    def apply(self, args: dict[str, Any]) -> dict[str, Any]:
        result = dict(args)
        result.setdefault(self.key, self.value)
        return result


class ChainTransform(BaseModel):
    """Apply several transforms in order."""
    kind: Literal["chain"] = "chain"
    steps: list[ParameterTransform] = Field(default_factory=list)

    def apply(self, args: dict[str, Any]) -> dict[str, Any]:
        result = dict(args)
        for step in self.steps:
            result = step.apply(result)
        return result


class CustomTransform(BaseModel):
    """Code-defined transform. Only its label is serialized."""
    kind: Literal["custom"] = "custom"
    label: str
    func: Callable[[dict[str, Any]], dict[str, Any]] = Field(..., exclude=True)

    def apply(self, args: dict[str, Any]) -> dict[str, Any]:
        return self.func(dict(args))


ParameterTransform = Annotated[
    Union[
        IdentityTransform,
        RenameKeyTransform,
        SetDefaultTransform,
        ChainTransform,
        CustomTransform,
    ],
    Field(discriminator="kind"),
]

ChainTransform.model_rebuild()


class AliasMetadata(BaseModel):
    """Curated entry describing what an alias is for."""
    alias: str
    intent: str
    tags: list[str] = Field(default_factory=list)
    description: str = ""


class AliasMatch(BaseModel):
    """Result of an intent search over alias metadata."""
    alias: str
    tool_name: str
    score: int
    matched: list[str] = Field(default_factory=list)
    metadata: AliasMetadata
