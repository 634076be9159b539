# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..common.constants import (
    DEFAULT_SERVICE_DESCRIPTION,
    DEFAULT_SERVICE_DISPLAY_NAME,
    DEFAULT_SERVICE_NAME,
    ENV_CASE_SENSITIVE_PREFIX,
    ENV_INFER_TYPES,
    ENV_XML_FILE_PATH,
)
from ._error_codes import VALIDATION_MISSING_CONFIGURATION
from .errors import ValidationError
from .telemetry import TelemetryConfig

_TRUTHY = ("1", "true", "yes", "y", "on")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class BrokerConfig:
    """
    Configuration settings for the XML service broker.

    :param xml_file_path: Path to the XML document exposed by the broker.
    :type xml_file_path: str or None
    :param case_sensitive_prefix: Whether List prefix matching is case-sensitive (default: True).
    :type case_sensitive_prefix: bool
    :param infer_types: When the document carries no inline schema, type each column from its
        first non-empty value instead of treating every column as text (default: False).
    :type infer_types: bool
    :param service_name: System name of the service instance.
    :type service_name: str
    :param display_name: Display name of the service instance.
    :type display_name: str
    :param description: Description of the service instance.
    :type description: str
    :param telemetry: Optional telemetry settings; telemetry is disabled when omitted.
    :type telemetry: ~ServiceBroker.Xml.core.telemetry.TelemetryConfig or None
    """
    xml_file_path: Optional[str] = None

    # Query behavior
    case_sensitive_prefix: bool = True
    infer_types: bool = False

    # Service instance metadata
    service_name: str = DEFAULT_SERVICE_NAME
    display_name: str = DEFAULT_SERVICE_DISPLAY_NAME
    description: str = DEFAULT_SERVICE_DESCRIPTION

    telemetry: Optional[TelemetryConfig] = None

    @classmethod
    def from_env(cls) -> "BrokerConfig":
        """
        Create a configuration instance from ``XML_BROKER_*`` environment variables.

        :return: Configuration instance; unset variables keep their defaults.
        :rtype: ~ServiceBroker.Xml.core.config.BrokerConfig
        """
        return cls(
            xml_file_path=os.environ.get(ENV_XML_FILE_PATH) or None,
            case_sensitive_prefix=_env_flag(ENV_CASE_SENSITIVE_PREFIX, True),
            infer_types=_env_flag(ENV_INFER_TYPES, False),
        )


@dataclass
class ConfigurationSetting:
    name: str
    required: bool = False
    value: Any = None


class ServiceConfiguration:
    """
    Named settings surfaced to the operator when a service instance is registered.

    Settings keep their registration order. Values are opaque to the broker.

    Example::

        settings = ServiceConfiguration()
        settings.add("XMLFilePath", True, "")
        settings["XMLFilePath"] = "/data/customers.xml"
        settings.validate()
    """

    def __init__(self) -> None:
        self._settings: Dict[str, ConfigurationSetting] = {}

    def add(self, name: str, required: bool = False, default: Any = None) -> ConfigurationSetting:
        """
        Register a setting, or update the flags of an existing one.

        An existing value is kept when the setting is registered again.

        :param name: Setting name.
        :type name: str
        :param required: Whether the setting must carry a value.
        :type required: bool
        :param default: Initial value.
        :return: The registered setting.
        :rtype: ConfigurationSetting
        """
        setting = self._settings.get(name)
        if setting is None:
            setting = ConfigurationSetting(name=name, required=required, value=default)
            self._settings[name] = setting
        else:
            setting.required = required
        return setting

    def __getitem__(self, name: str) -> Any:
        return self._settings[name].value

    def __setitem__(self, name: str, value: Any) -> None:
        if name in self._settings:
            self._settings[name].value = value
        else:
            self._settings[name] = ConfigurationSetting(name=name, value=value)

    def __contains__(self, name: object) -> bool:
        return name in self._settings

    def __iter__(self) -> Iterator[str]:
        return iter(self._settings)

    def __len__(self) -> int:
        return len(self._settings)

    def get(self, name: str, default: Any = None) -> Any:
        setting = self._settings.get(name)
        return default if setting is None else setting.value

    def items(self) -> List[Tuple[str, Any]]:
        return [(name, setting.value) for name, setting in self._settings.items()]

    def missing_required(self) -> List[str]:
        return [
            name
            for name, setting in self._settings.items()
            if setting.required and (setting.value is None or str(setting.value).strip() == "")
        ]

    def validate(self) -> None:
        """
        Check that every required setting carries a value.

        :raises ~ServiceBroker.Xml.core.errors.ValidationError: Listing the missing settings.
        """
        missing = self.missing_required()
        if missing:
            raise ValidationError(
                f"Missing required configuration settings: {', '.join(missing)}",
                subcode=VALIDATION_MISSING_CONFIGURATION,
                details={"settings": missing},
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            name: {"required": setting.required, "value": setting.value}
            for name, setting in self._settings.items()
        }


__all__ = ["BrokerConfig", "ConfigurationSetting", "ServiceConfiguration"]
