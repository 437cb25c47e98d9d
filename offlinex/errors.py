"""
OfflineX 錯誤處理模組。

定義庫內所有異常的基礎類，以及在 dispatch 時檢查設定所拋出的
ConfigurationError。
"""
import traceback as _traceback
from typing import Any, Dict, Optional


class OfflineXError(Exception):
    """所有 OfflineX 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        初始化異常。

        Args:
            message: 人類可讀的錯誤訊息
            details: 附加的結構化資訊
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = "".join(_traceback.format_stack()[:-1])

    def to_dict(self) -> Dict[str, Any]:
        """轉為可序列化的字典，方便記錄或上報。"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class ConfigurationError(OfflineXError):
    """配置相關的錯誤。"""

    def __init__(
        self,
        message: str,
        component: str,
        config_key: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        details = {"component": component}
        if config_key is not None:
            details["config_key"] = config_key
        details.update(kwargs)
        super().__init__(message, details)
        self.component = component
        self.config_key = config_key
