"""
Collector HTTP session: connection pooling, CA bundle, no transport retries.

Only the upload step of delivery talks to the network, and each delivery
attempt is exactly one POST. A non-2xx answer or a transport error is
reported to the caller; the snapshot stays on disk and the next launch's
sweep is the retry.
"""

import os
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import SDK_VERSION

USER_AGENT = f"SessionLogger/{SDK_VERSION}"


def _retry_strategy():
    # One request per attempt; hand 5xx responses back instead of raising.
    return Retry(total=0, raise_on_status=False)


def _get_ca_bundle():
    """
    Get the CA bundle path.

    Priority: env var → certifi → system default.
    """
    env_ca = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    try:
        import certifi
        return certifi.where()
    except ImportError:
        return True


def create_session():
    """A requests.Session for the collector, with pooling and SSL set up."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=4,                         # periodic + host + shutdown + sweep
        max_retries=_retry_strategy(),
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    session.headers["User-Agent"] = USER_AGENT
    return session


def post_json(url, json_text, headers=None, timeout=None):
    """POST a JSON document as UTF-8. Raises requests.RequestException."""
    merged = {"Content-Type": "application/json"}
    merged.update(headers or {})
    return http.post(url, data=json_text.encode("utf-8"), headers=merged, timeout=timeout)


# Global shared session
http = create_session()
