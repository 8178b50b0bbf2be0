"""
NuGet Feed Strategy

Resolves and downloads paket.exe from a NuGet v2 feed or from a local folder
of .nupkg files. The executable is extracted from the package's tools folder.
"""

import logging
import os
import re
import shutil
import zipfile
from typing import List, Optional

from paketboot import utils
from paketboot.constants import (
    BOOTSTRAPPER_EXE,
    BOOTSTRAPPER_PACKAGE_ID,
    DEFAULT_NUGET_SOURCE,
    NUGET_PACKAGE_PATH,
    NUGET_PACKAGE_VERSIONS_PATH,
    NUPKG_EXTENSION,
    NUPKG_TOOLS_DIR,
    PAKET_EXE,
    PAKET_PACKAGE_ID,
)
from paketboot.exceptions import DownloadError, NetworkError
from paketboot.semver import latest_of

from .base import DownloadStrategy


def is_remote_source(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def extract_tool(package_path: str, tool_name: str, target: str) -> None:
    """
    Extract `tools/<tool_name>` from a .nupkg archive to `target`.

    Raises:
        DownloadError: If the archive is corrupt or does not contain the tool.
    """
    wanted = f"{NUPKG_TOOLS_DIR}/{tool_name}".lower()
    try:
        with zipfile.ZipFile(package_path, "r") as archive:
            member = next(
                (
                    info
                    for info in archive.infolist()
                    if info.filename.replace("\\", "/").lower() == wanted
                ),
                None,
            )
            if member is None:
                raise DownloadError(
                    f"{tool_name} not found in package",
                    details=os.path.basename(package_path),
                )

            temp_target = f"{target}.extract.{os.getpid()}"
            try:
                with archive.open(member) as src, open(temp_target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                utils.replace_file(temp_target, target)
            finally:
                if os.path.exists(temp_target):
                    os.remove(temp_target)
    except zipfile.BadZipFile as exc:
        raise DownloadError(
            "Corrupted package archive", details=f"{package_path}: {exc}"
        ) from exc


class NugetDownloadStrategy(DownloadStrategy):
    """Download strategy backed by a NuGet v2 feed or a package folder."""

    def __init__(
        self,
        bootstrapper_path: str,
        nuget_source: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Parameters:
            bootstrapper_path (str): Location of the bootstrapper executable replaced by self-update.
            nuget_source (Optional[str]): Feed URL or folder path; defaults to nuget.org.
            logger (Optional[logging.Logger]): Diagnostic sink.
        """
        super().__init__(logger)
        self.bootstrapper_path = bootstrapper_path
        source = nuget_source or DEFAULT_NUGET_SOURCE
        self.nuget_source = source.rstrip("/") if is_remote_source(source) else source

    @property
    def name(self) -> str:
        return "Nuget"

    @property
    def is_remote(self) -> bool:
        return is_remote_source(self.nuget_source)

    def list_versions(self, package_id: str = PAKET_PACKAGE_ID) -> List[str]:
        """
        List every published version of `package_id`.

        Raises:
            requests.RequestException: For feed network or HTTP errors.
            NetworkError: If the feed answers with something other than a version list.
            OSError: If a folder source cannot be read.
        """
        if self.is_remote:
            url = f"{self.nuget_source}/" + NUGET_PACKAGE_VERSIONS_PATH.format(
                package_id=package_id
            )
            versions = utils.http_get_json(url)
            if not isinstance(versions, list):
                raise NetworkError("Invalid package version list", url=url)
            return [v for v in versions if isinstance(v, str)]

        pattern = re.compile(
            rf"^{re.escape(package_id)}\.(\d.*){re.escape(NUPKG_EXTENSION)}$",
            re.IGNORECASE,
        )
        versions = []
        for file_name in sorted(os.listdir(self.nuget_source)):
            match = pattern.match(file_name)
            if match:
                versions.append(match.group(1))
        return versions

    def _get_latest_version_core(self, ignore_prerelease: bool) -> str:
        latest = latest_of(self.list_versions(), ignore_prerelease)
        if latest is None:
            raise NetworkError(
                f"No {PAKET_PACKAGE_ID} versions found", url=self.nuget_source
            )
        return latest

    def fetch_package(self, package_id: str, version: str) -> str:
        """
        Make the .nupkg for `package_id`/`version` available locally.

        Returns:
            str: Path of the package file. Remote packages land in a temp file.
        """
        if not self.is_remote:
            package_path = os.path.join(
                self.nuget_source, f"{package_id}.{version}{NUPKG_EXTENSION}"
            )
            if not os.path.isfile(package_path):
                raise DownloadError(
                    f"Package {package_id} {version} not found", url=package_path
                )
            return package_path

        url = f"{self.nuget_source}/" + NUGET_PACKAGE_PATH.format(
            package_id=package_id, version=version
        )
        temp_file = utils.get_temp_file(f"{package_id}{NUPKG_EXTENSION}")
        self.logger.info(f"Starting download from {url}")
        utils.download_file(url, temp_file)
        return temp_file

    def _install_tool(
        self, package_id: str, version: str, tool_name: str, target: str
    ) -> None:
        package_path = self.fetch_package(package_id, version)
        try:
            extract_tool(package_path, tool_name, target)
        finally:
            if self.is_remote and os.path.exists(package_path):
                os.remove(package_path)

    def _download_version_core(self, version: str, target: str) -> None:
        self._install_tool(PAKET_PACKAGE_ID, version, PAKET_EXE, target)

    def _self_update_core(self, version: str) -> None:
        temp_file = utils.get_temp_file("paket.bootstrapper")
        self._install_tool(BOOTSTRAPPER_PACKAGE_ID, version, BOOTSTRAPPER_EXE, temp_file)
        utils.install_bootstrapper(temp_file, self.bootstrapper_path)
