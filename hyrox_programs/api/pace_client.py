"""
Elite pace provider client.

Fetches coach-maintained training paces for an athlete. The provider is
optional: every failure is logged and reported as "no pace data".
"""

import logging
from typing import Dict, Optional

import requests

from ..analysis.vdot import PaceModel
from ..config import config

logger = logging.getLogger(__name__)


class PaceProviderError(Exception):
    """Custom exception for pace provider errors."""
    pass


class ElitePaceClient:
    """HTTP client for the elite pace provider."""

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.base_url = (base_url if base_url is not None else config.PACE_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.PACE_API_TIMEOUT
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        token = token if token is not None else config.PACE_API_TOKEN
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def _get(self, path: str) -> Dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise PaceProviderError(f"Request to {url} failed: {e}")
        except ValueError as e:
            raise PaceProviderError(f"Invalid JSON from {url}: {e}")

    def fetch_paces(self, athlete_id: str) -> Optional[PaceModel]:
        """
        Fetch an athlete's training paces.

        Returns:
            A validated PaceModel, or None when the provider is not configured,
            unreachable, slow, or returns unusable data
        """
        if not self.enabled:
            logger.debug("Pace provider not configured")
            return None

        try:
            data = self._get(f"/athletes/{athlete_id}/paces")
            model = PaceModel.from_dict(data.get("paces", data), source="elite provider")
        except PaceProviderError as e:
            logger.warning(f"Pace provider unavailable for athlete {athlete_id}: {e}")
            return None
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Malformed pace data for athlete {athlete_id}: {e}")
            return None

        if not model.is_valid():
            logger.warning(f"Pace provider returned invalid bands for athlete {athlete_id}")
            return None

        logger.info(f"Loaded elite paces for athlete {athlete_id} ({model.confidence.value} confidence)")
        return model
