"""
GitHub Release Strategy

Resolves and downloads paket.exe from the fsprojects/Paket GitHub releases.
"""

import logging
from typing import Any, Dict, List, Optional

from paketboot import utils
from paketboot.constants import (
    BOOTSTRAPPER_EXE,
    GITHUB_API_TIMEOUT,
    GITHUB_MAX_PER_PAGE,
    PAKET_EXE,
    PAKET_RELEASE_DOWNLOAD_URL,
    PAKET_RELEASES_API_URL,
)
from paketboot.exceptions import NetworkError
from paketboot.semver import latest_of

from .base import DownloadStrategy


class GitHubDownloadStrategy(DownloadStrategy):
    """Download strategy backed by the GitHub releases API."""

    def __init__(
        self,
        bootstrapper_path: str,
        github_token: Optional[str] = None,
        releases_url: str = PAKET_RELEASES_API_URL,
        download_url_template: str = PAKET_RELEASE_DOWNLOAD_URL,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Parameters:
            bootstrapper_path (str): Location of the bootstrapper executable replaced by self-update.
            github_token (Optional[str]): Token sent as Authorization header to raise API rate limits.
            releases_url (str): GitHub API URL listing the releases.
            download_url_template (str): Asset URL with `{version}` and `{file_name}` placeholders.
            logger (Optional[logging.Logger]): Diagnostic sink.
        """
        super().__init__(logger)
        self.bootstrapper_path = bootstrapper_path
        self.github_token = github_token.strip() if github_token else None
        self.releases_url = releases_url
        self.download_url_template = download_url_template

    @property
    def name(self) -> str:
        return "Github"

    def _api_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.github_token:
            headers["Authorization"] = f"token {self.github_token}"
        return headers

    def fetch_releases(self) -> List[Dict[str, Any]]:
        """
        Fetch the raw release list from the GitHub API.

        Raises:
            requests.RequestException: For network or HTTP errors.
            NetworkError: If the response is not a list of releases.
        """
        releases = utils.http_get_json(
            self.releases_url,
            headers=self._api_headers(),
            params={"per_page": GITHUB_MAX_PER_PAGE},
            timeout=GITHUB_API_TIMEOUT,
        )
        if not isinstance(releases, list):
            raise NetworkError(
                "Invalid releases data received from GitHub API", url=self.releases_url
            )
        return releases

    def _get_latest_version_core(self, ignore_prerelease: bool) -> str:
        tags: List[str] = []
        for release in self.fetch_releases():
            if not isinstance(release, dict) or release.get("draft"):
                continue
            tag_name = release.get("tag_name")
            if not isinstance(tag_name, str) or not tag_name.strip():
                self.logger.debug("Skipping release with missing or invalid tag_name")
                continue
            if ignore_prerelease and release.get("prerelease"):
                continue
            tags.append(tag_name.strip())

        latest = latest_of(tags, ignore_prerelease)
        if latest is None:
            raise NetworkError("No releases found on GitHub", url=self.releases_url)
        return latest

    def _download_version_core(self, version: str, target: str) -> None:
        url = self.download_url_template.format(version=version, file_name=PAKET_EXE)
        self.logger.info(f"Starting download from {url}")
        utils.download_file(url, target)

    def _self_update_core(self, version: str) -> None:
        url = self.download_url_template.format(
            version=version, file_name=BOOTSTRAPPER_EXE
        )
        temp_file = utils.get_temp_file("paket.bootstrapper")
        self.logger.info(f"Starting download of bootstrapper from {url}")
        utils.download_file(url, temp_file)
        utils.install_bootstrapper(temp_file, self.bootstrapper_path)
