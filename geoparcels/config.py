"""Configuration of the parcel data source"""

from __future__ import annotations

__all__ = ['IngestionConfig']

import os
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError, validate_call

from geoparcels._const import DEFAULT_BASE_URL, DEFAULT_DATASET_ID
from geoparcels.exceptions import ConfigurationError

_ENV_PREFIX = 'GEOPARCELS_'
_FIELDS = ('dataset_id', 'base_url', 'api_key', 'filter', 'target_global_id')


def _none_if_empty(value: Optional[str]) -> Optional[str]:
    return value if value else None


@validate_call
def _validate_fields(
    dataset_id: int,
    base_url: str,
    api_key: Optional[str],
    filter: Optional[str],  # pylint: disable=redefined-builtin
    target_global_id: Optional[Union[str, int]],
) -> tuple:
    return dataset_id, base_url, api_key, filter, target_global_id


class IngestionConfig:
    """
    Where and what to fetch: the dataset, the API endpoint and key, an optional
    server-side $filter expression and an optional parcel global id to search for.

    Instances are immutable; use .replace() to derive a new configuration. Empty
    strings for `filter` and `target_global_id` mean "no filter" / "no target".

    Args:
        dataset_id: (Default 1497)
            The dataset identifier on the open data portal

        base_url: (Default 'https://apidata.mos.ru/v1/datasets')
            The datasets endpoint; pages are fetched from
            '{base_url}/{dataset_id}/features'

        api_key: (Default '')
            The API credential. Required before any request is made.

        filter: (Optional)
            An OData-style $filter expression, passed through unchanged

        target_global_id: (Optional)
            The global id of a single parcel to search for

    Raises:
        ConfigurationError: if a value can't be coerced to its field's type
    """

    __slots__ = _FIELDS

    def __init__(
        self,
        dataset_id: int = DEFAULT_DATASET_ID,
        base_url: str = DEFAULT_BASE_URL,
        api_key: Optional[str] = '',
        filter: Optional[str] = None,  # pylint: disable=redefined-builtin
        target_global_id: Optional[Union[str, int]] = None,
    ):
        try:
            dataset_id, base_url, api_key, filter, target_global_id = _validate_fields(
                dataset_id, base_url, api_key, filter, target_global_id
            )
        except ValidationError as exc:
            raise ConfigurationError(f'Invalid ingestion configuration: {exc}') from exc

        object.__setattr__(self, 'dataset_id', dataset_id)
        object.__setattr__(self, 'base_url', base_url.rstrip('/'))
        object.__setattr__(self, 'api_key', api_key or '')
        object.__setattr__(self, 'filter', _none_if_empty(filter))
        object.__setattr__(self, 'target_global_id', _none_if_empty(
            None if target_global_id is None else str(target_global_id)
        ))

    def __setattr__(self, key, value):
        raise AttributeError('IngestionConfig is immutable; use .replace()')

    def __eq__(self, other):
        if not isinstance(other, IngestionConfig):
            return False

        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(tuple(self.to_dict().values()))

    def __repr__(self):
        # Never echo the credential
        key = '***' if self.api_key else "''"
        return (
            f'<IngestionConfig(dataset_id={self.dataset_id}, base_url={self.base_url!r}, '
            f'api_key={key}, filter={self.filter!r}, '
            f'target_global_id={self.target_global_id!r})>'
        )

    @property
    def features_url(self) -> str:
        """The endpoint serving the dataset's features"""
        return f'{self.base_url}/{self.dataset_id}/features'

    @classmethod
    def from_env(cls, **overrides) -> IngestionConfig:
        """
        Builds a configuration from GEOPARCELS_DATASET_ID, GEOPARCELS_BASE_URL,
        GEOPARCELS_API_KEY, GEOPARCELS_FILTER and GEOPARCELS_TARGET_GLOBAL_ID.
        Unset variables keep their defaults; keyword overrides win over both.

        Returns:
            IngestionConfig

        Raises:
            ConfigurationError: if a variable holds an invalid value
        """
        values: Dict[str, Any] = {}
        for field in _FIELDS:
            env_value = os.getenv(f'{_ENV_PREFIX}{field.upper()}')
            if env_value is not None:
                values[field] = env_value

        values.update(overrides)
        return cls(**values)

    def replace(self, **changes) -> IngestionConfig:
        """
        Derives a new configuration with some fields changed. Fields passed as None
        keep their current value, except `filter` and `target_global_id`, for which
        None (like '') clears the setting.

        Returns:
            IngestionConfig

        Raises:
            ConfigurationError: if an unknown option is given or a value is invalid
        """
        unknown = set(changes) - set(_FIELDS)
        if unknown:
            raise ConfigurationError(f'Unknown configuration option(s): {sorted(unknown)}')

        values = self.to_dict()
        for key, value in changes.items():
            if value is None and key not in ('filter', 'target_global_id'):
                continue
            values[key] = value

        return IngestionConfig(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {field: getattr(self, field) for field in _FIELDS}
