"""Manifest schema models using Pydantic.

Wire keys follow the lower-case YAML keys used in manifests (``pipelineid``,
``scmid``, ``actionid``...). Python attributes are snake_case aliases of
those keys; dump with ``by_alias=True`` to get the wire format back.

The models only check structure. Required ``kind`` values and the ``groupby``
mode are checked by ``Pipeline.init``, so that one bad discovered manifest
fails on its own instead of aborting the run.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class GroupBy(str, Enum):
    """How discovered manifests are grouped into pipelines."""

    ALL = "all"
    INDIVIDUAL = "individual"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


def _none_to_empty(v: Any) -> Any:
    return "" if v is None else v


class ScmConfig(BaseModel):
    """Source-control binding declared in a manifest."""

    kind: str = Field("", description="SCM kind (git, github, gitlab...)")
    spec: Dict[str, Any] = Field(default_factory=dict, description="Kind specific settings")

    @field_validator("kind", mode="before")
    @classmethod
    def coerce_none(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("spec", mode="before")
    @classmethod
    def default_spec(cls, v: Any) -> Any:
        return {} if v is None else v


class ActionConfig(BaseModel):
    """Action (pull request, merge request...) declared in a manifest."""

    kind: str = Field("", description="Action kind")
    title: str = Field("", description="Title used for the delivered action")
    scm_id: str = Field("", alias="scmid", description="SCM the action is attached to")
    spec: Dict[str, Any] = Field(default_factory=dict, description="Kind specific settings")

    model_config = {"populate_by_name": True}

    @field_validator("kind", "title", "scm_id", mode="before")
    @classmethod
    def coerce_none(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("spec", mode="before")
    @classmethod
    def default_spec(cls, v: Any) -> Any:
        return {} if v is None else v


class StageConfig(BaseModel):
    """A source, condition or target stage.

    Stage execution is handled elsewhere; the discovery core only needs the
    references between stages and SCMs to validate a pipeline.
    """

    kind: str = Field("", description="Resource kind")
    name: str = Field("", description="Human-readable stage name")
    spec: Dict[str, Any] = Field(default_factory=dict)
    scm_id: str = Field("", alias="scmid")
    source_id: str = Field("", alias="sourceid")
    depends_on: List[str] = Field(default_factory=list, alias="dependson")

    model_config = {"populate_by_name": True}

    @field_validator("kind", "name", "scm_id", "source_id", mode="before")
    @classmethod
    def coerce_none(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("spec", mode="before")
    @classmethod
    def default_spec(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("depends_on", mode="before")
    @classmethod
    def default_depends_on(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class AutoDiscoverySpec(BaseModel):
    """Autodiscovery block of a parent manifest.

    Instances are immutable; the deprecated ``pullrequestid`` migration
    produces a new instance with ``model_copy(update=...)``.
    """

    crawlers: Optional[Dict[str, Dict[str, Any]]] = Field(
        None, description="Crawler kind -> crawler settings. None disables autodiscovery."
    )
    scm_id: str = Field("", alias="scmid")
    action_id: str = Field("", alias="actionid")
    pullrequest_id: str = Field(
        "", alias="pullrequestid", description="Deprecated alias of actionid"
    )
    group_by: str = Field("", alias="groupby", description="all, individual or empty")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("crawlers", mode="before")
    @classmethod
    def default_crawler_specs(cls, v: Any) -> Any:
        """Allow ``dockerfile:`` with no settings in YAML."""
        if isinstance(v, dict):
            return {kind: ({} if spec is None else spec) for kind, spec in v.items()}
        return v

    @field_validator("scm_id", "action_id", "pullrequest_id", mode="before")
    @classmethod
    def coerce_none(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("group_by", mode="before")
    @classmethod
    def normalize_group_by(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, GroupBy):
            return v.value
        return str(v).strip().lower()

    @property
    def group_by_is_valid(self) -> bool:
        return self.group_by in {"", GroupBy.ALL.value, GroupBy.INDIVIDUAL.value}

    @property
    def effective_group_by(self) -> GroupBy:
        """Grouping mode with the empty value resolved to ALL."""
        if self.group_by == GroupBy.INDIVIDUAL.value:
            return GroupBy.INDIVIDUAL
        return GroupBy.ALL


class ManifestSpec(BaseModel):
    """Root pipeline manifest, hand-authored or generated by a crawler."""

    name: str = Field("", description="Pipeline display name")
    pipeline_id: str = Field("", alias="pipelineid", description="Stable pipeline identity")
    version: str = Field("", description="Version of the engine the manifest targets")
    title: str = Field("", description="Optional pipeline title")
    scms: Dict[str, ScmConfig] = Field(default_factory=dict)
    actions: Dict[str, ActionConfig] = Field(default_factory=dict)
    sources: Dict[str, StageConfig] = Field(default_factory=dict)
    conditions: Dict[str, StageConfig] = Field(default_factory=dict)
    targets: Dict[str, StageConfig] = Field(default_factory=dict)
    autodiscovery: Optional[AutoDiscoverySpec] = None

    model_config = {"populate_by_name": True}

    @field_validator("name", "pipeline_id", "version", "title", mode="before")
    @classmethod
    def coerce_none(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("scms", "actions", "sources", "conditions", "targets", mode="before")
    @classmethod
    def default_mappings(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def has_autodiscovery(self) -> bool:
        """True when the manifest declares at least an empty crawler mapping."""
        return self.autodiscovery is not None and self.autodiscovery.crawlers is not None

    def to_wire(self) -> Dict[str, Any]:
        """Dump the manifest using its YAML keys, omitting defaults."""
        return self.model_dump(by_alias=True, exclude_defaults=True, mode="json")
