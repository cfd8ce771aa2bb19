"""
Classification rule tables and validation of user-supplied rule files.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple


class RulesValidationError(ValueError):
    """Raised when a rules file is missing, malformed, or names unknown fields."""


DEFAULT_HARD_EXCLUSIONS: FrozenSet[str] = frozenset(
    {
        # this application
        "com.menubarmanager.app",
        "MenuBarManager",
        # browsers
        "com.google.Chrome",
        "com.mozilla.firefox",
        "com.microsoft.edgemac",
        "com.apple.Safari",
        # input methods
        "com.sogou.inputmethod",
        "com.baidu.inputmethod",
        "com.tencent.inputmethod",
        "com.iflytek.inputmethod",
        "com.microsoft.inputmethod",
        # messengers
        "com.tencent.xinWeChat",
        "com.tencent.WeWorkMac",
        "com.wechat.wechat",
        # installers and cloud sync
        "com.adobe.acc.installer",
        "com.adobe.CCLibrary",
        "com.microsoft.OneDrive",
        "com.dropbox.Dropbox",
        "com.spotify.client",
        "com.apple.Music",
        "com.apple.MobileSMS",
        "com.apple.FaceTime",
        # developer and system tools
        "com.apple.dt.Xcode",
        "com.apple.simulator",
        "com.apple.ActivityMonitor",
        "com.apple.Console",
    }
)

DEFAULT_HELPER_PATTERNS: FrozenSet[str] = frozenset(
    {
        "helper",
        "renderer",
        "agent",
        "service",
        "daemon",
        "monitor",
        "extension",
        "plugin",
        "updater",
        "launcher",
        "notifier",
        "sync",
        "installer",
        "uninstaller",
        "inputmethod",
        "小程序",
        "小助手",
        "助手",
        "输入法",
    }
)

DEFAULT_IMPORTANT_OVERRIDES: FrozenSet[str] = frozenset(
    {
        "postgres",
        "docker",
        "database",
        "server",
        "mysql",
        "redis",
        "mongodb",
        "ollama",
        "nginx",
        "apache",
        "node",
        "python",
        "java",
        "git",
    }
)

DEFAULT_PRIORITY: Tuple[str, ...] = (
    "Bartender",
    "Hidden Bar",
    "CleanMyMac",
    "1Blocker",
    "AdGuard",
    "Proxyman",
    "Charles",
    "ClashX",
    "Surge",
    "ShadowsocksX",
    "Docker",
    "Postgres",
    "Redis",
    "MongoDB",
    "Ollama",
    "Battery Health",
    "iStat Menus",
    "MenuMeters",
    "System Preferences",
)

DEFAULT_LOW_PRIORITY_KEYWORDS: Tuple[str, ...] = (
    "monitor",
    "stats",
    "meter",
    "temperature",
    "fan",
    "cpu",
    "memory",
    "download",
    "upload",
    "converter",
    "cleaner",
    "backup",
    "game",
    "entertainment",
    "music",
    "video",
    "photo",
)

DEFAULT_SYSTEM_PREFIXES: Tuple[str, ...] = ("com.apple.",)


@dataclass(frozen=True)
class ClassificationRules:
    """
    Immutable rule set consulted by the classifier and the orderer.

    Hard exclusions win over everything; important overrides only waive a
    helper-pattern match.
    """

    hard_exclusions: FrozenSet[str] = DEFAULT_HARD_EXCLUSIONS
    helper_patterns: FrozenSet[str] = DEFAULT_HELPER_PATTERNS
    important_overrides: FrozenSet[str] = DEFAULT_IMPORTANT_OVERRIDES
    system_prefixes: Tuple[str, ...] = DEFAULT_SYSTEM_PREFIXES
    priority: Tuple[str, ...] = DEFAULT_PRIORITY
    low_priority_keywords: Tuple[str, ...] = DEFAULT_LOW_PRIORITY_KEYWORDS
    require_icon: bool = False
    _lowered: Dict[str, Tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        lowered = {
            "helper_patterns": tuple(sorted(p.lower() for p in self.helper_patterns)),
            "important_overrides": tuple(sorted(p.lower() for p in self.important_overrides)),
            "priority": tuple(p.lower() for p in self.priority),
        }
        object.__setattr__(self, "_lowered", lowered)

    @property
    def lowered_helper_patterns(self) -> Tuple[str, ...]:
        return self._lowered["helper_patterns"]

    @property
    def lowered_important_overrides(self) -> Tuple[str, ...]:
        return self._lowered["important_overrides"]

    @property
    def lowered_priority(self) -> Tuple[str, ...]:
        return self._lowered["priority"]

    def with_require_icon(self, require_icon: bool) -> "ClassificationRules":
        if require_icon == self.require_icon:
            return self
        return replace(self, require_icon=require_icon)


_SET_FIELDS = ("hard_exclusions", "helper_patterns", "important_overrides")
_SEQUENCE_FIELDS = ("system_prefixes", "priority", "low_priority_keywords")


def load_and_validate_rules(path: Optional[Path]) -> ClassificationRules:
    """
    Load a rules JSON file and merge it over the built-in defaults.

    Each key names a rule field. A list replaces the default table, while an
    object of the form ``{"add": [...], "remove": [...]}`` edits it. A missing
    path yields the defaults unchanged.
    """
    if path is None:
        return ClassificationRules()

    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RulesValidationError(f"Rules file not found: {path}") from exc
    except OSError as exc:
        raise RulesValidationError(f"Unable to read rules file: {path}") from exc

    try:
        raw_rules = json.loads(contents)
    except json.JSONDecodeError as exc:
        raise RulesValidationError(f"Rules file is not valid JSON: {exc}") from exc

    return rules_from_mapping(raw_rules)


def rules_from_mapping(raw_rules: Any) -> ClassificationRules:
    """Build a rule set from an already-decoded mapping."""
    if not isinstance(raw_rules, dict):
        raise RulesValidationError("Rules root must be a JSON object.")

    known = set(_SET_FIELDS) | set(_SEQUENCE_FIELDS) | {"require_icon"}
    unknown = sorted(set(raw_rules) - known)
    if unknown:
        raise RulesValidationError(f"Unknown rule fields: {', '.join(unknown)}.")

    defaults = ClassificationRules()
    overrides: Dict[str, Any] = {}

    for name in _SET_FIELDS:
        if name in raw_rules:
            merged = _merge_entries(getattr(defaults, name), raw_rules[name], field=name)
            overrides[name] = frozenset(merged)

    for name in _SEQUENCE_FIELDS:
        if name in raw_rules:
            overrides[name] = tuple(_merge_entries(getattr(defaults, name), raw_rules[name], field=name))

    if "require_icon" in raw_rules:
        value = raw_rules["require_icon"]
        if not isinstance(value, bool):
            raise RulesValidationError("require_icon must be true or false.")
        overrides["require_icon"] = value

    return replace(defaults, **overrides)


def _merge_entries(defaults: Iterable[str], value: Any, *, field: str) -> list[str]:
    if isinstance(value, list):
        return _require_string_list(value, field=field)

    if not isinstance(value, dict):
        raise RulesValidationError(
            f"{field} must be a list or an object with 'add'/'remove' lists."
        )

    extra = sorted(set(value) - {"add", "remove"})
    if extra:
        raise RulesValidationError(f"{field} only supports 'add' and 'remove', got: {', '.join(extra)}.")

    additions = _require_string_list(value.get("add", []), field=f"{field}.add")
    removals = set(_require_string_list(value.get("remove", []), field=f"{field}.remove"))

    merged = [entry for entry in defaults if entry not in removals]
    for entry in additions:
        if entry not in merged:
            merged.append(entry)
    return merged


def _require_string_list(value: Any, *, field: str) -> list[str]:
    if not isinstance(value, list):
        raise RulesValidationError(f"{field} must be a list of strings.")

    entries: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise RulesValidationError(f"{field} entries must be strings.")
        stripped = item.strip()
        if not stripped:
            raise RulesValidationError(f"{field} entries must be non-empty.")
        entries.append(stripped)
    return entries
