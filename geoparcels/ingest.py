"""
Paginated retrieval of parcel features from the open data API
"""

__all__ = [
    'IngestionResult', 'PageProgress', 'ParcelClient', 'TerminationReason',
]

from enum import Enum
import json
import math
import threading
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from geoparcels._const import MAX_PAGE_SIZE
from geoparcels.config import IngestionConfig
from geoparcels.crs import LocalProjectedCrs
from geoparcels.exceptions import ConfigurationError, IngestionCancelled, TransportError
from geoparcels.features import ParcelFeature
from geoparcels.parsers import extract_features, matches_target, parse_feature
from geoparcels.utils.mixins import LoggingMixin

_UNSET: Any = object()

# Page bodies are read in chunks of this many bytes, checking for cancellation in between
READ_CHUNK_SIZE = 64 * 1024


class TerminationReason(Enum):
    """Why an ingestion loop stopped"""
    CANCELLED = 'cancelled'  # cancellation was signalled
    MAX_RECORDS = 'max_records'  # enough matches were collected
    SINGLE_PAGE = 'single_page'  # only one page was requested
    EMPTY_PAGE = 'empty_page'  # a page came back with no features
    SHORT_PAGE = 'short_page'  # a page came back smaller than requested
    TARGET_FOUND = 'target_found'  # the target parcel was found


class PageProgress:
    """Snapshot handed to progress callbacks after each page"""

    def __init__(
        self,
        collected_count: int,
        processed_count: int,
        chunk_size: int,
        received_count: int,
        skip: int,
    ):
        self.collected_count = collected_count
        self.processed_count = processed_count
        self.chunk_size = chunk_size
        self.received_count = received_count
        self.skip = skip

    def __repr__(self):
        return (
            f'<PageProgress(collected={self.collected_count}, processed={self.processed_count}, '
            f'received={self.received_count}, skip={self.skip})>'
        )

    def to_dict(self) -> Dict[str, int]:
        return dict(vars(self))


class IngestionResult:
    """
    The outcome of a completed ingestion loop.

    Attributes:
        features:
            The matching ParcelFeatures, in API order

        processed_count:
            The number of raw features received across all pages

        termination:
            Why the loop stopped

        pages:
            The number of page requests that were answered
    """

    def __init__(
        self,
        features: List[ParcelFeature],
        processed_count: int,
        termination: TerminationReason,
        pages: int,
    ):
        self.features = features
        self.processed_count = processed_count
        self.termination = termination
        self.pages = pages

    def __iter__(self):
        return iter(self.features)

    def __len__(self):
        return len(self.features)

    def __repr__(self):
        return (
            f'<IngestionResult({len(self.features)} features, processed={self.processed_count}, '
            f'pages={self.pages}, termination={self.termination.value})>'
        )


class ParcelClient(LoggingMixin):
    """
    Fetches cadastral parcels from a paginated GeoJSON API and converts them into the
    local grid.

    Pages are requested one at a time. Nothing is retried: a failed page request
    aborts the whole ingestion call with TransportError.

    Args:
        config: (Optional)
            The data source configuration. Defaults to IngestionConfig().

        crs: (Optional)
            The LocalProjectedCrs used by .to_local(). Defaults to a new MSK-77 instance.

        session: (Optional)
            The transport: a requests.Session, or any object with a compatible
            get(url, params=..., timeout=..., stream=True) method. Defaults to a new
            requests.Session, which is owned (and closed) by the client.

        timeout: (Optional)
            Passed to the transport with every request. The client itself enforces
            no timeout.
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        crs: Optional[LocalProjectedCrs] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[Union[float, tuple]] = None,
    ):
        super().__init__()
        self.config = config or IngestionConfig()
        self.crs = crs or LocalProjectedCrs()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return f'<ParcelClient({self.config!r})>'

    def close(self) -> None:
        """Releases the connection pool of a session created by this client"""
        if self._owns_session:
            self.session.close()

    def configure(self, reset_origin: bool = False, **options) -> IngestionConfig:
        """
        Replaces the client's configuration with one derived from the current one.

        Args:
            reset_origin: (Default False)
                If True, also discards the CRS's cached local origin

        Keyword Args:
            Any IngestionConfig field. '' or None clears `filter` / `target_global_id`.

        Returns:
            The new IngestionConfig
        """
        self.config = self.config.replace(**options)
        if reset_origin:
            self.crs.reset_origin()
            self.logger.info('Local origin reset')

        return self.config

    @staticmethod
    def build_page_params(
        api_key: str,
        top: int = MAX_PAGE_SIZE,
        skip: int = 0,
        filter: Optional[str] = None,  # pylint: disable=redefined-builtin
    ) -> Dict[str, str]:
        """
        Builds the query string of a page request. $top is clamped to 1..MAX_PAGE_SIZE;
        $skip is omitted when zero and $filter when empty.

        Returns:
            dict
        """
        params = {
            'api_key': api_key,
            '$format': 'geojson',
            '$top': str(max(1, min(int(top), MAX_PAGE_SIZE))),
        }
        if skip:
            params['$skip'] = str(skip)
        if filter:
            params['$filter'] = filter

        return params

    def fetch_page(
        self,
        top: int = MAX_PAGE_SIZE,
        skip: int = 0,
        filter: Optional[str] = _UNSET,  # pylint: disable=redefined-builtin
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        """
        Requests a single page of features.

        Args:
            top: (Default 1000)
                The page size (clamped to 1..1000)

            skip: (Default 0)
                The offset of the first feature

            filter: (Optional)
                The $filter expression. Defaults to the configured filter.

            cancel_event: (Optional)
                If already set, no request is sent. If set while the response
                body is being read, the request is abandoned.

        Returns:
            The decoded JSON body

        Raises:
            ConfigurationError: if no API key is configured (no request is sent)
            IngestionCancelled: if cancel_event is set before or during the request
            TransportError: on a non-success HTTP status
        """
        if not self.config.api_key:
            raise ConfigurationError('Parcels API key is not configured')

        if cancel_event is not None and cancel_event.is_set():
            raise IngestionCancelled('Cancelled before requesting page')

        if filter is _UNSET:
            filter = self.config.filter

        params = self.build_page_params(self.config.api_key, top, skip, filter)
        self.logger.debug('GET %s $top=%s $skip=%s', self.config.features_url, params['$top'], skip)

        with self.session.get(
            self.config.features_url, params=params, timeout=self.timeout, stream=True
        ) as response:
            if not response.ok:
                try:
                    body = response.text
                except Exception:  # pylint: disable=broad-except
                    body = ''
                raise TransportError(response.status_code, body, getattr(response, 'reason', None))

            chunks = []
            for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                if cancel_event is not None and cancel_event.is_set():
                    raise IngestionCancelled('Cancelled while reading page')
                chunks.append(chunk)

        if cancel_event is not None and cancel_event.is_set():
            raise IngestionCancelled('Cancelled while reading page')

        return json.loads(b''.join(chunks))

    def load_parcels(
        self,
        fetch_all: bool = True,
        batch_size: int = MAX_PAGE_SIZE,
        initial_top: int = MAX_PAGE_SIZE,
        max_records: Optional[float] = None,
        filter: Optional[str] = _UNSET,  # pylint: disable=redefined-builtin
        target_global_id: Optional[str] = _UNSET,
        on_progress: Optional[Callable[[PageProgress], Any]] = None,
        cancel_event: Optional[threading.Event] = None,
        skip: int = 0,
    ) -> IngestionResult:
        """
        Pages through the dataset, collecting the features that normalize to parcel
        geometry and match the target (if any).

        After each page, the loop stops on the first of:
            1) cancellation was signalled (partial results are returned)
            2) `max_records` matches have been collected
            3) `fetch_all` is False
            4) the page was smaller than requested (end of data)
            5) a target global id is set and has been found
        A page with no features at all also ends the loop.

        Args:
            fetch_all: (Default True)
                If False, only one page (of `initial_top` features) is requested

            batch_size: (Default 1000)
                The page size when fetching everything (clamped to 1..1000)

            initial_top: (Default 1000)
                The page size of the single page requested when fetch_all is False

            max_records: (Optional)
                Stop once this many matches are collected. Defaults to 1 when a target
                is set, otherwise unbounded; values <= 0 mean unbounded.

            filter: (Optional)
                The $filter expression. Defaults to the configured filter.

            target_global_id: (Optional)
                Only collect the feature with this global id. Defaults to the
                configured target.

            on_progress: (Optional)
                Called with a PageProgress after each page. Exceptions it raises
                are ignored.

            cancel_event: (Optional)
                A threading.Event; when set, the loop stops before the next page

            skip: (Default 0)
                The offset to start from

        Returns:
            IngestionResult

        Raises:
            ConfigurationError: if no API key is configured
            TransportError: if any page request fails
        """
        if filter is _UNSET:
            filter = self.config.filter
        if target_global_id is _UNSET:
            target_global_id = self.config.target_global_id

        target = str(target_global_id) if target_global_id not in (None, '') else None

        if max_records is None:
            max_records = 1 if target else math.inf
        max_matches = max_records if max_records > 0 else math.inf

        collected: List[ParcelFeature] = []
        processed_count, pages, current_skip = 0, 0, skip

        while True:
            if cancel_event is not None and cancel_event.is_set():
                termination = TerminationReason.CANCELLED
                break

            chunk_size = max(1, min(batch_size if fetch_all else initial_top, MAX_PAGE_SIZE))
            try:
                payload = self.fetch_page(chunk_size, current_skip, filter, cancel_event)
            except IngestionCancelled:
                termination = TerminationReason.CANCELLED
                break

            pages += 1
            raw_features = extract_features(payload)
            if not raw_features:
                if not isinstance(payload, (dict, list)) or (
                    isinstance(payload, dict) and not isinstance(payload.get('features'), list)
                ):
                    self.warn_once(
                        'Page response carries no feature list; treating it as the end '
                        'of data. (this warning will not repeat)'
                    )
                termination = TerminationReason.EMPTY_PAGE
                break

            processed_count += len(raw_features)
            for raw in raw_features:
                if not matches_target(raw, target):
                    continue

                feature = parse_feature(raw)
                if feature is None:
                    continue

                collected.append(feature)
                if len(collected) >= max_matches:
                    break

            self._report_progress(
                on_progress,
                PageProgress(
                    collected_count=len(collected),
                    processed_count=processed_count,
                    chunk_size=chunk_size,
                    received_count=len(raw_features),
                    skip=current_skip,
                )
            )

            termination = self._termination_after_page(
                cancel_event, len(collected), max_matches, fetch_all,
                len(raw_features), chunk_size, target,
            )
            if termination is not None:
                break

            current_skip += len(raw_features)

        self.logger.info(
            'Ingestion finished (%s): %d of %d features collected over %d page(s)',
            termination.value, len(collected), processed_count, pages
        )
        return IngestionResult(collected, processed_count, termination, pages)

    @staticmethod
    def _termination_after_page(
        cancel_event: Optional[threading.Event],
        collected_count: int,
        max_matches: float,
        fetch_all: bool,
        received_count: int,
        chunk_size: int,
        target: Optional[str],
    ) -> Optional[TerminationReason]:
        """The end-of-page checks, in priority order; None means fetch another page"""
        if cancel_event is not None and cancel_event.is_set():
            return TerminationReason.CANCELLED
        if collected_count >= max_matches:
            return TerminationReason.MAX_RECORDS
        if not fetch_all:
            return TerminationReason.SINGLE_PAGE
        if received_count < chunk_size:
            return TerminationReason.SHORT_PAGE
        if target and collected_count:
            return TerminationReason.TARGET_FOUND

        return None

    def _report_progress(
        self,
        on_progress: Optional[Callable[[PageProgress], Any]],
        progress: PageProgress,
    ) -> None:
        if on_progress is None:
            return

        try:
            on_progress(progress)
        except Exception:  # pylint: disable=broad-except
            self.logger.debug('Progress callback raised; ignored', exc_info=True)

    def to_local(self, features: List[ParcelFeature]) -> List[ParcelFeature]:
        """
        Converts parcels into local grid meters with this client's CRS, dropping any
        with no usable ring left.

        Args:
            features:
                ParcelFeatures in lon/lat degrees

        Returns:
            List[ParcelFeature] in local meters
        """
        converted = []
        for feature in features:
            local = feature.to_local(self.crs)
            if local is not None:
                converted.append(local)

        return converted
