"""
Pydantic models for the AI orchestration layer.

JSON aliases mirror the shapes the prompts ask providers to return:
- scripture:    [{"verse_num": 16, "verse_string": "..."}]
- verse search: [{"book": "John", "chapter": 3, "startVerse": 16, "endVerse": 16}]
- scoring:      {"ContextScore": 85, "ContextExplanation": "...", "ApplicationFeedback": "..."}
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ServiceType(str, Enum):
    """Fixed set of backend kinds."""

    GEMINI = "gemini"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    OLLAMA = "ollama"
    REFORMED_BIBLE = "reformed_bible"
    ESV = "esv"


@dataclass(frozen=True)
class ProviderDescriptor:
    """Identity and metadata of one provider implementation."""

    provider_id: str
    display_name: str
    service_type: ServiceType
    default_model: str
    priority: int


class VerseRef(BaseModel):
    """A scripture reference such as Romans 12:12-14."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    book: str = Field(..., min_length=1)
    chapter: int = Field(..., ge=1)
    start_verse: int = Field(..., ge=1, alias="startVerse")
    end_verse: int = Field(..., ge=1, alias="endVerse")

    @field_validator("book")
    @classmethod
    def strip_book(cls, value: str) -> str:
        v = value.strip()
        if not v:
            raise ValueError("book must not be blank")
        return v

    @property
    def is_single_verse(self) -> bool:
        return self.start_verse == self.end_verse

    def to_text(self) -> str:
        if self.is_single_verse:
            return f"{self.book} {self.chapter}:{self.start_verse}"
        return f"{self.book} {self.chapter}:{self.start_verse}-{self.end_verse}"

    def __str__(self) -> str:
        return self.to_text()


class ScriptureVerse(BaseModel):
    """One verse of retrieved scripture."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    verse_num: int = Field(..., ge=0)
    verse_text: str = Field(..., alias="verse_string")

    @field_validator("verse_text")
    @classmethod
    def require_text(cls, value: str) -> str:
        v = value.strip()
        if not v:
            raise ValueError("verse text must not be blank")
        return v


class ScoreResult(BaseModel):
    """Context-accuracy score, its explanation and feedback on the user's application."""

    model_config = ConfigDict(populate_by_name=True)

    context_score: int = Field(..., ge=0, le=100, alias="ContextScore")
    context_explanation: str = Field(..., alias="ContextExplanation")
    application_feedback: str = Field("", alias="ApplicationFeedback")


class ProviderConfig(BaseModel):
    """Settings applied to one provider by `configure`."""

    provider_id: str = Field(..., min_length=1)
    display_name: str = ""
    service_type: ServiceType
    model_name: str = Field("", description="Blank selects the provider's default model")
    api_key: str = Field("", repr=False)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    enabled: bool = True
    base_url: Optional[str] = Field(None, description="Endpoint override (self-hosted backends, tests)")


class AggregateSettings(BaseModel):
    """A configuration batch: the preferred provider plus one config per provider id."""

    selected_provider_id: Optional[str] = None
    configs: Dict[str, ProviderConfig] = Field(default_factory=dict)

    @model_validator(mode="after")
    def keys_match_provider_ids(self) -> "AggregateSettings":
        for key, config in self.configs.items():
            if key != config.provider_id:
                raise ValueError(
                    f"configs key {key!r} does not match provider_id {config.provider_id!r}"
                )
        return self

    @classmethod
    def from_configs(
        cls,
        configs: List[ProviderConfig],
        selected_provider_id: Optional[str] = None,
    ) -> "AggregateSettings":
        """Build settings from a list; a repeated provider id is a caller error."""
        mapping: Dict[str, ProviderConfig] = {}
        for config in configs:
            if config.provider_id in mapping:
                raise ValueError(f"duplicate config for provider {config.provider_id!r}")
            mapping[config.provider_id] = config
        return cls(selected_provider_id=selected_provider_id, configs=mapping)


class ConfigurationReport(BaseModel):
    """Outcome of one `AIService.configure` call."""

    results: Dict[str, bool] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)

    @property
    def has_successful_configurations(self) -> bool:
        return any(self.results.values())

    @property
    def all_configurations_successful(self) -> bool:
        return bool(self.results) and all(self.results.values())


class RegistryStatistics(BaseModel):
    """Aggregate counts over the registry, recomputed on every call."""

    total_providers: int
    available_providers: int
    ai_providers: int
    scripture_providers: int
    available_scripture_providers: int = 0
    providers_by_type: Dict[str, int] = Field(default_factory=dict)
