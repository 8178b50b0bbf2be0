# src/paketboot/utils.py
import importlib.metadata
import os
import shutil
import tempfile
import time
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.utils import get_netrc_auth
from urllib3.util.retry import Retry  # type: ignore

from paketboot.constants import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONNECT_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    OLD_FILE_SUFFIX,
    RETRY_STATUS_CODES,
)
from paketboot.log_utils import logger
from paketboot.proxy import resolve_proxy

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `Paket.Bootstrapper paketboot/{version}`, where `{version}` is the installed
        package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version("paketboot")
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"Paket.Bootstrapper paketboot/{app_version}"

    return _USER_AGENT_CACHE


def create_session(url: str) -> requests.Session:
    """
    Create a requests session prepared for `url`.

    Every session carries the same request shaping: the bootstrapper user agent,
    gzip/deflate negotiation, host credentials from netrc, a retrying adapter and
    the proxy chosen by `resolve_proxy`. Environment proxy lookup inside requests
    is disabled so the resolver stays the single source of proxy decisions.
    """
    session = requests.Session()
    session.trust_env = False
    session.headers.update(
        {
            "User-Agent": get_user_agent(),
            "Accept-Encoding": "gzip, deflate",
        }
    )

    credentials = get_netrc_auth(url)
    if credentials:
        session.auth = credentials

    proxy = resolve_proxy(url)
    if proxy is not None:
        # Proxy credentials travel in the proxy URL; requests sends them as
        # Proxy-Authorization to the proxy only.
        proxy_credentials = (
            get_netrc_auth(proxy.address) if proxy.use_default_credentials else None
        )
        session.proxies.update(proxy.for_requests(url, proxy_credentials))

    retry_strategy: Retry = Retry(
        total=DEFAULT_CONNECT_RETRIES,
        connect=DEFAULT_CONNECT_RETRIES,
        read=DEFAULT_CONNECT_RETRIES,
        status=DEFAULT_CONNECT_RETRIES,
        backoff_factor=DEFAULT_BACKOFF_FACTOR,
        status_forcelist=list(RETRY_STATUS_CODES),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def http_get(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[int] = None,
) -> requests.Response:
    """
    Perform a GET request and return the response.

    Raises:
        requests.HTTPError: For HTTP error responses.
        requests.RequestException: For lower-level network or request errors.
    """
    logger.debug(f"GET {url}")
    with create_session(url) as session:
        response = session.get(
            url,
            headers=headers,
            params=params,
            timeout=timeout or DEFAULT_REQUEST_TIMEOUT,
        )
    logger.debug(f"Received HTTP {response.status_code} for {url}")
    response.raise_for_status()
    return response


def http_get_json(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[int] = None,
) -> Any:
    """GET `url` and decode the JSON body."""
    return http_get(url, headers=headers, params=params, timeout=timeout).json()


def download_file(url: str, target: str, timeout: Optional[int] = None) -> None:
    """
    Stream `url` into `target`, replacing any existing file.

    The body is written to a temporary file next to the target first and moved
    into place once complete; the temporary file is removed on failure.

    Raises:
        requests.RequestException: For network or HTTP errors.
        OSError: If the file cannot be written or moved.
    """
    parent_dir = os.path.dirname(os.path.abspath(target))
    os.makedirs(parent_dir, exist_ok=True)
    temp_path = f"{target}.tmp.{os.getpid()}.{int(time.time() * 1000)}"

    logger.debug(f"Downloading {url} to {target}")
    start_time = time.time()
    try:
        with create_session(url) as session:
            with session.get(
                url, stream=True, timeout=timeout or DEFAULT_REQUEST_TIMEOUT
            ) as response:
                response.raise_for_status()
                downloaded_bytes = 0
                with open(temp_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            downloaded_bytes += len(chunk)
        replace_file(temp_path, target)
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.debug(f"Could not remove temporary file {temp_path}: {e}")

    logger.debug(
        f"Downloaded {downloaded_bytes} bytes from {url} in {time.time() - start_time:.2f}s"
    )


def get_temp_file(name: str) -> str:
    """
    Return a process-unique path in the temp directory for `name`.

    Any file already at that path is removed.
    """
    file_name = os.path.join(tempfile.gettempdir(), f"{name}{os.getpid()}")
    if os.path.exists(file_name):
        os.remove(file_name)
    return file_name


def replace_file(old_path: str, new_path: str) -> None:
    """
    Move `old_path` onto `new_path`.

    An existing destination is deleted first; a destination that vanishes
    between the check and the delete is ignored. Any other failure propagates.
    """
    try:
        if os.path.exists(new_path):
            os.remove(new_path)
    except FileNotFoundError:
        pass

    shutil.move(old_path, new_path)


def install_bootstrapper(downloaded_path: str, bootstrapper_path: str) -> None:
    """
    Install a freshly downloaded bootstrapper over the current one.

    The running file is moved aside to `<name>.old` first, since an executing
    binary cannot always be overwritten in place.
    """
    if os.path.exists(bootstrapper_path):
        replace_file(bootstrapper_path, bootstrapper_path + OLD_FILE_SUFFIX)
    replace_file(downloaded_path, bootstrapper_path)
    logger.info(f"Updated bootstrapper at {bootstrapper_path}")
