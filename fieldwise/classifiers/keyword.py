"""KeywordClassifier: ordered keyword rules, zero external deps, works offline."""

from __future__ import annotations

import html
import logging

from .. import patterns as p
from ..types import (
    Autocapitalization,
    Decision,
    EmbeddedContentConfig,
    FieldDescriptor,
    KeyboardConfig,
    KeyboardType,
    MapConfig,
    NativeConfig,
    NativeControl,
    RuleConfig,
    Strategy,
)
from .base import Classifier

logger = logging.getLogger(__name__)

GEO_STRATEGIES = ("webview", "map")

_PLACEHOLDER_WIDGET = """\
<div style="padding: 20px; text-align: center; color: white; font-family: -apple-system;">
    <h3>WebView</h3>
    <p>Showing custom HTML for <b>{name}</b></p>
    <button onclick="sendValue('Confirmed')" style="padding: 10px 20px; font-size: 16px; border-radius: 8px;">Confirm</button>
</div>"""

_SELECT_WIDGET = """\
<div style="font-family: -apple-system, sans-serif; padding: 10px; color: white;">
    <label style="font-size: 14px; color: #888;">Select Option</label>
    <select onchange="sendValue(this.value)" style="width: 100%; font-size: 18px; padding: 12px; margin-top: 8px; background: #1c1c1e; color: white; border: 1px solid #333; border-radius: 8px; -webkit-appearance: none;">
        <option value="">Choose...</option>
        {options}
    </select>
</div>"""


def clean_label(label: str) -> str:
    """Drop one trailing colon and surrounding whitespace."""
    if label.endswith(":"):
        label = label[:-1]
    return label.strip()


def infer_options(name: str) -> tuple[str, ...]:
    if p.contains_any(name, p.COUNTRY_KEYWORDS):
        return p.COUNTRY_OPTIONS
    if p.contains_any(name, p.CITY_KEYWORDS):
        return p.CITY_OPTIONS
    return p.GENERIC_OPTIONS


def infer_range(name: str) -> tuple[float, float, float]:
    if p.contains_any(name, p.STAR_KEYWORDS):
        return p.STAR_RANGE
    return p.PERCENT_RANGE


def placeholder_widget(name: str) -> str:
    return _PLACEHOLDER_WIDGET.format(name=html.escape(name))


def select_widget(options: tuple[str, ...]) -> str:
    rendered = "".join(
        f"<option value='{html.escape(o, quote=True)}'>{html.escape(o)}</option>"
        for o in options
    )
    return _SELECT_WIDGET.format(options=rendered)


class KeywordClassifier(Classifier):
    """Decide an input strategy from keywords in the field name.

    Rules are tested in a fixed order and the first hit wins, so a name like
    "Sign date" is a signature, not a date. Names matching nothing get a
    plain sentence-case keyboard.
    """

    def __init__(self, config: RuleConfig | None = None) -> None:
        self.config = config or RuleConfig()
        if self.config.geo_strategy not in GEO_STRATEGIES:
            raise ValueError(
                f"Unknown geo_strategy: {self.config.geo_strategy!r}. "
                f"Use one of {GEO_STRATEGIES}."
            )

    @property
    def name(self) -> str:
        return "keyword"

    async def classify(self, descriptor: FieldDescriptor) -> Decision:
        return self.decide(descriptor)

    def decide(self, descriptor: FieldDescriptor) -> Decision:
        """Synchronous classification; never raises."""
        name = descriptor.name.lower()
        logger.debug("Analyzing field: %r (original: %r)", name, descriptor.name)
        decision = self._match(name, clean_label(descriptor.name))
        logger.info(
            "Keyword decision: %s | label: %s", decision.strategy.value, decision.label,
        )
        return decision

    def _match(self, name: str, label: str) -> Decision:
        if p.contains_any(name, p.SIGNATURE_KEYWORDS):
            return Decision(strategy=Strategy.SIGNATURE, label="Signature", placeholder="Draw here")

        if p.contains_any(name, p.DATE_KEYWORDS):
            return Decision(
                strategy=Strategy.NATIVE,
                label=label,
                placeholder="Select date",
                native=NativeConfig(control=NativeControl.DATE_PICKER),
            )

        if p.contains_any(name, p.COLOR_KEYWORDS):
            return Decision(
                strategy=Strategy.NATIVE,
                label=label,
                placeholder="Pick color",
                native=NativeConfig(control=NativeControl.COLOR_PICKER),
            )

        if p.contains_any(name, p.EMBEDDED_KEYWORDS):
            if self.config.geo_strategy == "map" and p.contains_any(name, p.GEO_KEYWORDS):
                return Decision(
                    strategy=Strategy.MAP,
                    label=label,
                    map=MapConfig(show_user_location=True),
                )
            return Decision(
                strategy=Strategy.WEBVIEW,
                label=label,
                webview=EmbeddedContentConfig(html=placeholder_widget(name)),
            )

        if p.contains_any(name, p.SELECTION_KEYWORDS):
            return Decision(
                strategy=Strategy.WEBVIEW,
                label=label,
                placeholder="Select option",
                webview=EmbeddedContentConfig(html=select_widget(infer_options(name))),
            )

        if p.contains_any(name, p.RATING_KEYWORDS):
            return Decision(
                strategy=Strategy.NATIVE,
                label=label,
                native=NativeConfig(control=NativeControl.SLIDER, range=infer_range(name)),
            )

        if p.contains_any(name, p.TOGGLE_KEYWORDS):
            return Decision(
                strategy=Strategy.NATIVE,
                label=label,
                native=NativeConfig(control=NativeControl.TOGGLE),
            )

        if p.contains_any(name, p.EMAIL_KEYWORDS):
            return _keyboard(label, "email@example.com", KeyboardType.EMAIL, "emailAddress",
                             Autocapitalization.NONE)

        if p.contains_any(name, p.PHONE_KEYWORDS):
            return _keyboard(label, "+1...", KeyboardType.PHONE, "telephoneNumber",
                             Autocapitalization.NONE)

        if p.contains_any(name, p.NUMBER_KEYWORDS):
            return _keyboard(label, "0", KeyboardType.NUMBER, None, Autocapitalization.NONE)

        if p.contains_any(name, p.PASSWORD_KEYWORDS):
            return _keyboard(label, "••••••••", KeyboardType.DEFAULT, "password",
                             Autocapitalization.NONE)

        if p.contains_any(name, p.NAME_KEYWORDS):
            return _keyboard(label, "John Doe", KeyboardType.DEFAULT, "name",
                             Autocapitalization.WORDS)

        return _keyboard(label, "Enter value", KeyboardType.DEFAULT, None,
                         Autocapitalization.SENTENCES)


def _keyboard(
    label: str,
    placeholder: str,
    kb_type: KeyboardType,
    content_type: str | None,
    autocap: Autocapitalization,
) -> Decision:
    return Decision(
        strategy=Strategy.KEYBOARD,
        label=label,
        placeholder=placeholder,
        keyboard=KeyboardConfig(type=kb_type, content_type=content_type, autocapitalization=autocap),
    )
