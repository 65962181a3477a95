"""Pydantic models for catalog descriptors and service metadata.

Defines the canonical descriptor shape shared by the local descriptor tree
and every provider normalizer (``CanonicalDescriptor``, ``ServiceMeta``,
``InputDefinition``).  The configuration template is a tagged union whose
variant is selected by the descriptor's ``transport`` field.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

SourceType = Literal["official", "community"]
TransportType = Literal["stdio", "sse", "streamable-http"]
StatusType = Literal["active", "deprecated", "experimental"]
InputType = Literal["string", "password", "number", "boolean"]

SOURCES = ("official", "community")
HTTP_TRANSPORTS = ("sse", "streamable-http")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class InputDefinition(_CamelModel):
    """A user-supplied parameter required to instantiate a template."""

    label: str
    required: bool = False
    type: InputType = "string"
    default: Optional[str] = None
    description: Optional[str] = None


class Maintainer(_CamelModel):
    name: str
    url: Optional[str] = None
    github: Optional[str] = None


class StdioTemplate(_CamelModel):
    """Process-invocation template for ``stdio`` descriptors."""

    command: str = Field(..., min_length=1)
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)


class HttpTemplate(_CamelModel):
    """Remote endpoint template for ``sse`` / ``streamable-http`` descriptors."""

    type: Literal["sse", "streamable-http"]
    url: str = Field(..., min_length=1)
    headers: Optional[Dict[str, str]] = None


ConfigurationTemplate = Union[StdioTemplate, HttpTemplate]


class Configuration(_CamelModel):
    template: ConfigurationTemplate


class DescriptorMetadata(_CamelModel):
    homepage: Optional[str] = None
    author: Optional[str] = None
    repository: Optional[str] = None
    added_at: Optional[str] = Field(default=None, alias="addedAt")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")
    use_count: Optional[int] = Field(default=None, alias="useCount")


def _template_from_raw(transport: Any, raw: Any) -> Any:
    """Build the template variant selected by *transport*.

    Raises ``ValueError`` when the template does not fit the variant.
    """
    if isinstance(raw, (StdioTemplate, HttpTemplate)) or not isinstance(raw, dict):
        return raw
    model = StdioTemplate if transport == "stdio" else HttpTemplate
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValueError(
            f"configuration.template does not match transport '{transport}': {problems}"
        ) from None


class CanonicalDescriptor(_CamelModel):
    """One catalog entry describing an invocable MCP server.

    Unknown keys from the source document are kept and serialized back
    unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    schema_ref: Optional[str] = Field(default=None, alias="$schema")
    id: str = Field(..., min_length=1)
    name: str
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: str = ""
    category: str = "general"
    icon: str = "server"
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")
    source: SourceType
    maintainer: Optional[Maintainer] = None
    status: StatusType = "active"
    version: str = "latest"
    transport: TransportType
    inputs: Dict[str, InputDefinition] = Field(default_factory=dict)
    configuration: Configuration
    metadata: Optional[DescriptorMetadata] = None
    provider: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _select_template_variant(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # Unknown transports are reported by field validation.
        if data.get("transport") not in ("stdio",) + HTTP_TRANSPORTS:
            return data
        configuration = data.get("configuration")
        if isinstance(configuration, dict) and "template" in configuration:
            data = dict(data)
            data["configuration"] = {
                **configuration,
                "template": _template_from_raw(data.get("transport"), configuration["template"]),
            }
        return data

    @model_validator(mode="after")
    def _check_template_matches_transport(self) -> CanonicalDescriptor:
        template = self.configuration.template
        if self.transport == "stdio":
            if not isinstance(template, StdioTemplate):
                raise ValueError("stdio transport requires a command template")
        else:
            if not isinstance(template, HttpTemplate):
                raise ValueError(f"{self.transport} transport requires a url template")
            if template.type != self.transport:
                raise ValueError(
                    f"template type '{template.type}' does not match transport "
                    f"'{self.transport}'"
                )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the JSON shape served by the API."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ServiceMeta(_CamelModel):
    """Per-service metadata loaded from ``_meta.json``."""

    service: str = Field(..., min_length=1)
    display_name: str = Field(..., alias="displayName")
    description: str = ""
    website: Optional[str] = None
    icon: str = "server"
    category: str = "general"

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
