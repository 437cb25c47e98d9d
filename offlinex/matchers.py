"""
離線比對規則。

決定一個 action 或 thunk 是否需要離線處理。設定有三種互斥模式，依以下優先順序
只採用第一個有設定的：

1. action_types：action type 列表
2. regex_action_type：對 action type 做 regex 比對
3. regex_function_name：對 thunk 名稱做 regex 比對

都沒有設定時使用預設規則。設定在每次 dispatch 時重新驗證，不做快取，
所以在兩次 dispatch 之間修正設定可以立即生效。
"""
import re
from enum import Enum
from typing import Any, NamedTuple, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .thunks import OfflineUnit, UnitKind, describe

DEFAULT_ACTION_TYPE_REGEX = re.compile(r"FETCH.*REQUEST")
DEFAULT_FUNCTION_NAME_REGEX = re.compile(r"fetch", re.IGNORECASE)

_COMPONENT = "NetworkMiddleware"


class NetworkConfig:
    """
    網路中介軟體的設定。

    Attributes:
        action_types: 需要離線處理的 action type 列表
        regex_action_type: 比對 action type 的已編譯 regex
        regex_function_name: 比對 thunk 名稱的已編譯 regex
    """

    def __init__(
        self,
        action_types: Optional[Sequence[str]] = None,
        regex_action_type: Optional["re.Pattern[str]"] = None,
        regex_function_name: Optional["re.Pattern[str]"] = None,
    ) -> None:
        self.action_types = action_types
        self.regex_action_type = regex_action_type
        self.regex_function_name = regex_function_name

    def __repr__(self) -> str:
        return (
            f"NetworkConfig(action_types={self.action_types!r}, "
            f"regex_action_type={self.regex_action_type!r}, "
            f"regex_function_name={self.regex_function_name!r})"
        )


class MatchMode(Enum):
    ACTION_TYPES = "action_types"
    REGEX_ACTION_TYPE = "regex_action_type"
    REGEX_FUNCTION_NAME = "regex_function_name"
    DEFAULT = "default"


class MatchRule(NamedTuple):
    """驗證後的比對規則。"""

    mode: MatchMode
    action_types: Tuple[str, ...] = ()
    pattern: Optional["re.Pattern[str]"] = None

    def test(self, unit: OfflineUnit) -> bool:
        """
        判斷 unit 是否符合此規則。

        Args:
            unit: describe() 產生的 OfflineUnit

        Returns:
            符合時返回 True
        """
        if self.mode is MatchMode.ACTION_TYPES:
            return unit.kind is UnitKind.ACTION and unit.type in self.action_types
        if self.mode is MatchMode.REGEX_ACTION_TYPE:
            return _search(self.pattern, unit.type) if unit.kind is UnitKind.ACTION else False
        if self.mode is MatchMode.REGEX_FUNCTION_NAME:
            return _search(self.pattern, unit.name) if unit.kind is UnitKind.THUNK else False
        # 預設模式：action 看 type，thunk 看名稱
        if unit.kind is UnitKind.THUNK:
            return _search(DEFAULT_FUNCTION_NAME_REGEX, unit.name)
        return _search(DEFAULT_ACTION_TYPE_REGEX, unit.type)


class ValidationResult(NamedTuple):
    """validate_config 的結果，rule 與 error 只有一個不為 None。"""

    rule: Optional[MatchRule]
    error: Optional[ConfigurationError]


def _search(pattern: "re.Pattern[str]", value: Optional[str]) -> bool:
    return isinstance(value, str) and pattern.search(value) is not None


def _is_pattern(value: Any) -> bool:
    return isinstance(value, re.Pattern)


def validate_config(config: Optional[NetworkConfig]) -> ValidationResult:
    """
    驗證設定並產生比對規則，不拋出異常。

    Args:
        config: 網路中介軟體設定，None 代表使用預設規則

    Returns:
        ValidationResult；設定形狀錯誤時 error 為 ConfigurationError
    """
    if config is None:
        return ValidationResult(MatchRule(MatchMode.DEFAULT), None)

    if config.action_types is not None:
        action_types = config.action_types
        if not isinstance(action_types, (list, tuple)) or not all(
            isinstance(t, str) for t in action_types
        ):
            return ValidationResult(None, ConfigurationError(
                "You should pass an array as actionTypes param",
                component=_COMPONENT,
                config_key="action_types",
                value=action_types,
            ))
        return ValidationResult(MatchRule(MatchMode.ACTION_TYPES, action_types=tuple(action_types)), None)

    if config.regex_action_type is not None:
        if not _is_pattern(config.regex_action_type):
            return ValidationResult(None, ConfigurationError(
                "You should pass a regex as regexActionType param",
                component=_COMPONENT,
                config_key="regex_action_type",
                value=config.regex_action_type,
            ))
        return ValidationResult(MatchRule(MatchMode.REGEX_ACTION_TYPE, pattern=config.regex_action_type), None)

    if config.regex_function_name is not None:
        if not _is_pattern(config.regex_function_name):
            return ValidationResult(None, ConfigurationError(
                "You should pass a regex as regexFunctionName param",
                component=_COMPONENT,
                config_key="regex_function_name",
                value=config.regex_function_name,
            ))
        return ValidationResult(MatchRule(MatchMode.REGEX_FUNCTION_NAME, pattern=config.regex_function_name), None)

    return ValidationResult(MatchRule(MatchMode.DEFAULT), None)


def matches(action: Any, config: Optional[NetworkConfig] = None) -> bool:
    """
    判斷 action 或 thunk 是否需要離線處理。

    Args:
        action: Action 物件或 thunk
        config: 網路中介軟體設定

    Returns:
        是否符合目前的比對規則

    Raises:
        ConfigurationError: 設定欄位存在但形狀錯誤
    """
    result = validate_config(config)
    if result.error is not None:
        raise result.error
    return result.rule.test(describe(action))
