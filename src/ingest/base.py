"""
Base class for data loading
Provides common functionality for the CSV and GeoJSON sources
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
from tenacity import retry, stop_after_attempt, wait_exponential

from config import REQUEST_RETRIES, REQUESTS_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class DataSourceError(Exception):
    """Raised when a source cannot be fetched or parsed"""

    def __init__(self, source_name: str, location: str, message: str):
        super().__init__(f"{source_name} source {location}: {message}")
        self.source_name = source_name
        self.location = location


def is_remote(location: str) -> bool:
    """Check whether a source location is an http(s) URL"""
    return urlparse(location).scheme in ('http', 'https')


class BaseLoader(ABC):
    """Base class for all data loaders"""

    def __init__(self, source_name: str, location: str):
        self.source_name = source_name
        self.location = location
        self.logger = logging.getLogger(f"{__name__}.{source_name}")

    @abstractmethod
    def fetch_data(self) -> Any:
        """Fetch raw data from source"""
        pass

    @abstractmethod
    def transform_data(self, raw: Any) -> Any:
        """Transform raw data to the structure the pipeline consumes"""
        pass

    def load(self) -> Any:
        """Main loading method"""
        try:
            self.logger.info(f"Loading {self.source_name} from {self.location}")
            raw_data = self.fetch_data()
            data = self.transform_data(raw_data)
            self.logger.info(f"Successfully loaded {self.source_name} from {self.location}")
            return data
        except DataSourceError:
            raise
        except (requests.exceptions.RequestException, OSError, ValueError) as e:
            self.logger.error(f"Error loading {self.source_name} from {self.location}: {str(e)}")
            raise DataSourceError(self.source_name, self.location, str(e)) from e

    @retry(stop=stop_after_attempt(REQUEST_RETRIES),
           wait=wait_exponential(multiplier=1, min=4, max=10),
           reraise=True)
    def make_request(self, url: str, params: Optional[Dict] = None,
                     headers: Optional[Dict] = None) -> requests.Response:
        """Make HTTP request with retry logic"""
        try:
            response = requests.get(url, params=params, headers=headers,
                                    timeout=REQUESTS_TIMEOUT_SECONDS)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Request failed for {url}: {str(e)}")
            raise

    def read_source(self) -> str:
        """Read the source as text from a URL or a local file"""
        if is_remote(self.location):
            response = self.make_request(self.location)
            response.encoding = response.encoding or 'utf-8'
            return response.text
        return Path(self.location).read_text(encoding='utf-8')
