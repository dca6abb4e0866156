"""All dataclasses, enums, Protocols, and exceptions for fieldwise."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ClassifierError(Exception):
    """Base class for errors a classifier may raise."""

    def __init__(self, message: str, recovery_hint: str | None = None):
        super().__init__(message)
        self.recovery_hint = recovery_hint


class ClassifierUnavailableError(ClassifierError):
    """The generative backend cannot run right now (disabled, unreachable)."""


class MalformedOutputError(ClassifierError, ValueError):
    """Model text did not parse into a valid Decision."""


class TurnBudgetExceededError(ClassifierError):
    """A call tree used more agent turns than its budget allows."""

    RECOVERY_HINT = "Please provide a response based on the information you have."

    def __init__(self, max_turns: int):
        super().__init__(
            f"Max turn budget of {max_turns} agent turns exceeded.",
            recovery_hint=self.RECOVERY_HINT,
        )
        self.max_turns = max_turns


class InvalidDecisionError(ValueError):
    """A Decision was built with a config block that does not match its strategy."""


class LLMProviderError(Exception):
    def __init__(self, message: str, provider: str, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


@runtime_checkable
class LLMProvider(Protocol):
    def complete(self, system: str, user: str, max_tokens: int) -> str: ...


# ---------------------------------------------------------------------------
# Field Descriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldDescriptor:
    """A form field to classify. Built fresh per request."""
    name: str
    kind: str = "text"  # advisory hint: "text", "signature", "generative", ...
    nearby_context: str = ""
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)
    identifier: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.identifier,
            "name": self.name,
            "type": self.kind,
            "nearbyText": self.nearby_context,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldDescriptor:
        kwargs: dict[str, Any] = {
            "name": str(data.get("name", "")),
            "kind": str(data.get("type", "text")),
            "nearby_context": str(data.get("nearbyText", "")),
            "metadata": {str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
        }
        if data.get("id"):
            kwargs["identifier"] = str(data["id"])
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Decision Model
# ---------------------------------------------------------------------------

class Strategy(str, Enum):
    """Category of input control chosen for a field."""
    KEYBOARD = "keyboard"
    NATIVE = "native"
    SIGNATURE = "signature"
    WEBVIEW = "webview"     # embedded interactive content
    MAP = "map"


STRATEGY_ALIASES = {"embedded-content": Strategy.WEBVIEW, "embedded": Strategy.WEBVIEW}


class KeyboardType(str, Enum):
    DEFAULT = "default"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    DECIMAL = "decimal"
    URL = "url"


class Autocapitalization(str, Enum):
    NONE = "none"
    SENTENCES = "sentences"
    WORDS = "words"


class NativeControl(str, Enum):
    DATE_PICKER = "datePicker"
    COLOR_PICKER = "colorPicker"
    TOGGLE = "toggle"
    SLIDER = "slider"
    PICKER = "picker"
    STEPPER = "stepper"


@dataclass(frozen=True)
class KeyboardConfig:
    type: KeyboardType = KeyboardType.DEFAULT
    content_type: str | None = None  # semantic hint, e.g. "emailAddress", "name"
    autocapitalization: Autocapitalization = Autocapitalization.SENTENCES

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "autocapitalization": self.autocapitalization.value,
        }
        if self.content_type is not None:
            data["contentType"] = self.content_type
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KeyboardConfig:
        return cls(
            type=KeyboardType(data.get("type", "default")),
            content_type=data.get("contentType"),
            autocapitalization=Autocapitalization(data.get("autocapitalization", "sentences")),
        )


@dataclass(frozen=True)
class NativeConfig:
    control: NativeControl
    options: tuple[str, ...] | None = None           # picker only
    range: tuple[float, float, float] | None = None  # [min, max, step], slider/stepper only
    unit: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"control": self.control.value}
        if self.options is not None:
            data["options"] = list(self.options)
        if self.range is not None:
            data["range"] = list(self.range)
        if self.unit is not None:
            data["unit"] = self.unit
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NativeConfig:
        options = data.get("options")
        rng = data.get("range")
        if rng is not None:
            if len(rng) != 3:
                raise ValueError(f"range must be [min, max, step], got {rng!r}")
            rng = tuple(float(v) for v in rng)
        return cls(
            control=NativeControl(data["control"]),
            options=tuple(str(o) for o in options) if options is not None else None,
            range=rng,
            unit=data.get("unit"),
        )


@dataclass(frozen=True)
class EmbeddedContentConfig:
    html: str

    def to_dict(self) -> dict[str, Any]:
        return {"html": self.html}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmbeddedContentConfig:
        html = data["html"]
        if not isinstance(html, str):
            raise ValueError("html must be a string")
        return cls(html=html)


@dataclass(frozen=True)
class MapConfig:
    initial_region: tuple[float, float, float, float] | None = None  # [lat, long, spanLat, spanLong]
    show_user_location: bool = True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"showUserLocation": self.show_user_location}
        if self.initial_region is not None:
            data["initialRegion"] = list(self.initial_region)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MapConfig:
        region = data.get("initialRegion")
        if region is not None:
            if len(region) != 4:
                raise ValueError(f"initialRegion must have 4 values, got {region!r}")
            region = tuple(float(v) for v in region)
        return cls(
            initial_region=region,
            show_user_location=bool(data.get("showUserLocation", True)),
        )


# strategy -> name of the one config attribute it may carry
_BLOCK_FOR_STRATEGY: dict[Strategy, str | None] = {
    Strategy.KEYBOARD: "keyboard",
    Strategy.NATIVE: "native",
    Strategy.SIGNATURE: None,
    Strategy.WEBVIEW: "webview",
    Strategy.MAP: "map",
}

_CONFIG_TYPES = {
    "keyboard": KeyboardConfig,
    "native": NativeConfig,
    "webview": EmbeddedContentConfig,
    "map": MapConfig,
}


@dataclass(frozen=True)
class Decision:
    """Structured classification output consumed by a renderer.

    Exactly the config block belonging to ``strategy`` may be set.
    """
    strategy: Strategy
    label: str | None = None
    placeholder: str | None = None
    keyboard: KeyboardConfig | None = None
    native: NativeConfig | None = None
    webview: EmbeddedContentConfig | None = None
    map: MapConfig | None = None

    def __post_init__(self) -> None:
        allowed = _BLOCK_FOR_STRATEGY[self.strategy]
        for block in _CONFIG_TYPES:
            if block != allowed and getattr(self, block) is not None:
                raise InvalidDecisionError(
                    f"strategy {self.strategy.value!r} cannot carry a {block!r} block"
                )
        if allowed in ("native", "webview") and getattr(self, allowed) is None:
            raise InvalidDecisionError(
                f"strategy {self.strategy.value!r} requires a {allowed!r} block"
            )

    @property
    def config(self) -> KeyboardConfig | NativeConfig | EmbeddedContentConfig | MapConfig | None:
        block = _BLOCK_FOR_STRATEGY[self.strategy]
        return getattr(self, block) if block else None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"strategy": self.strategy.value}
        if self.label is not None:
            data["label"] = self.label
        if self.placeholder is not None:
            data["placeholder"] = self.placeholder
        block = _BLOCK_FOR_STRATEGY[self.strategy]
        if block and getattr(self, block) is not None:
            data[block] = getattr(self, block).to_dict()
        return data

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Decision:
        """Decode a Decision, keeping only the block that matches the strategy.

        Raises MalformedOutputError on anything that cannot form a valid Decision.
        """
        if not isinstance(data, dict):
            raise MalformedOutputError(f"expected a JSON object, got {type(data).__name__}")

        raw_strategy = str(data.get("strategy", "")).strip()
        try:
            strategy = STRATEGY_ALIASES.get(raw_strategy) or Strategy(raw_strategy)
        except ValueError:
            raise MalformedOutputError(f"unknown strategy: {raw_strategy!r}")

        label = data.get("label")
        placeholder = data.get("placeholder")
        kwargs: dict[str, Any] = {
            "strategy": strategy,
            "label": str(label) if label is not None else None,
            "placeholder": str(placeholder) if placeholder is not None else None,
        }

        block = _BLOCK_FOR_STRATEGY[strategy]
        if block:
            raw_block = data.get(block)
            if raw_block is None and block == "keyboard":
                kwargs[block] = KeyboardConfig()
            elif raw_block is None and block == "map":
                kwargs[block] = MapConfig()
            elif not isinstance(raw_block, dict):
                raise MalformedOutputError(f"strategy {raw_strategy!r} needs a {block!r} object")
            else:
                try:
                    kwargs[block] = _CONFIG_TYPES[block].from_dict(raw_block)
                except (KeyError, TypeError, ValueError) as e:
                    raise MalformedOutputError(f"invalid {block!r} block: {e}")

        return cls(**kwargs)

    @classmethod
    def from_json(cls, text: str) -> Decision:
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            raise MalformedOutputError(f"invalid JSON: {e}")
        return cls.from_dict(data)


def fallback_decision(field_name: str) -> Decision:
    """Safe default: plain keyboard entry labelled with the raw field name."""
    return Decision(
        strategy=Strategy.KEYBOARD,
        label=field_name,
        placeholder=f"Enter {field_name}",
        keyboard=KeyboardConfig(),
    )


# ---------------------------------------------------------------------------
# Orchestration results
# ---------------------------------------------------------------------------

class RequestState(str, Enum):
    """Lifecycle of one top-level classification request."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ClassificationRun:
    """Outcome of running one classifier against one descriptor."""
    classifier: str
    decision: Decision | None = None
    latency_ms: float = 0.0
    state: RequestState = RequestState.IDLE
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.state == RequestState.COMPLETED and self.decision is not None


@dataclass
class Comparison:
    """Side-by-side result of the rule-based and generative classifiers."""
    rule_based: ClassificationRun
    generative: ClassificationRun


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class RuleConfig:
    geo_strategy: str = "webview"  # "webview" or "map"


@dataclass
class GenerativeConfig:
    enabled: bool = True
    provider: str = ""
    max_tokens: int = 1024
    max_turns: int | None = 6  # agent turns per top-level request; None = unbounded


@dataclass
class OrchestratorConfig:
    prefer_generative: bool = True


@dataclass
class FieldwiseConfig:
    version: str = "0.1"
    rules: RuleConfig = field(default_factory=RuleConfig)
    generative: GenerativeConfig = field(default_factory=GenerativeConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    providers: dict[str, dict] = field(default_factory=dict)
