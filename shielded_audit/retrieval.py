"""
Artifact retrieval: the only I/O stage in front of encryption and decryption.

Locations are file paths or http(s) URLs. Retrieval failures surface as
KeyUnavailableError (retryable by the caller); undecodable payloads as
KeyMaterialError.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor

import requests

from .config import settings
from .custom_rlwe.keys import SecretShare
from .errors import KeyMaterialError, KeyUnavailableError
from .params import N

logger = logging.getLogger(__name__)


def _is_url(location):
    return location.startswith(("http://", "https://"))


def load_json_artifact(location, timeout=None):
    if _is_url(location):
        try:
            response = requests.get(location, timeout=timeout or settings.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise KeyUnavailableError(f"key unavailable: {location}: {e}") from e
        try:
            return response.json()
        except ValueError as e:
            raise KeyMaterialError(f"invalid key material: {location} is not JSON") from e

    try:
        with open(location) as f:
            return json.load(f)
    except OSError as e:
        raise KeyUnavailableError(f"key unavailable: {location}: {e}") from e
    except ValueError as e:
        raise KeyMaterialError(f"invalid key material: {location} is not JSON") from e


def public_key_loader(location=None, timeout=None):
    """Loader callable for PublicKeyCache."""
    location = location or settings.PUBLIC_KEY_LOCATION

    def loader():
        logger.info("Fetching auditor public key from %s", location)
        return load_json_artifact(location, timeout)

    return loader


def load_share_artifacts(locations=None, timeout=None, max_workers=None):
    """Fetch share artifacts concurrently; order follows `locations`."""
    locations = list(locations or settings.SHARE_LOCATIONS)
    if not locations:
        return []
    workers = min(max_workers or settings.RETRIEVAL_WORKERS, len(locations))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda loc: load_json_artifact(loc, timeout), locations))


def load_shares(locations=None, timeout=None, n=N):
    return [SecretShare.from_artifact(a, n) for a in load_share_artifacts(locations, timeout)]
