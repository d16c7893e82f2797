"""Source archive downloads.

Component sources that are not checked out with git (the managed runtime)
are fetched as release archives. An archive is streamed to a `.part` file
next to its destination and renamed into place once complete and verified.

Example:
    downloader = ArchiveDownloader()
    downloader.download_and_extract(url, root.downloads_dir, staging_dir)
"""

import hashlib
import logging
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import requests
from tqdm import tqdm

from ..errors import FetchError

TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar.bz2", ".tar.xz")


class DownloadError(FetchError):
    """The archive could not be retrieved or stored."""

    pass


class ChecksumError(FetchError):
    """The retrieved archive does not match the expected SHA256 digest."""

    pass


class ExtractionError(FetchError):
    """The archive is missing, corrupt or of an unknown format."""

    pass


def archive_name(url: str) -> str:
    """File name of the archive a URL points to."""
    return Path(urlparse(url).path).name


def _unpack_tar(archive: Path, dest: Path) -> None:
    with tarfile.open(archive, "r:*") as tar:
        tar.extractall(dest, filter="data")


def _unpack_zip(archive: Path, dest: Path) -> None:
    with zipfile.ZipFile(archive) as zf:
        zf.extractall(dest)


class ArchiveDownloader:
    """Streams source archives to disk and unpacks them."""

    def __init__(
        self,
        chunk_size: int = 8192,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize downloader.

        Args:
            chunk_size: Bytes read from the response per iteration
            timeout: Connect/read timeout in seconds
            logger: Logger to use (defaults to this module's logger)
        """
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.log = logger or logging.getLogger(__name__)

    def download(
        self,
        url: str,
        dest: Path,
        checksum: Optional[str] = None,
        show_progress: bool = True,
    ) -> Path:
        """Fetch an archive into dest.

        Args:
            url: Archive URL
            dest: Where the finished archive is stored
            checksum: Expected SHA256 hex digest, not verified when omitted
            show_progress: Display a tqdm progress bar

        Returns:
            dest

        Raises:
            DownloadError: On HTTP/network errors or when dest cannot be written
            ChecksumError: If the digest does not match
        """
        dest = Path(dest)
        partial = dest.with_name(dest.name + ".part")

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            response = requests.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()
            digest = self._stream(response, partial, archive_name(url), show_progress)
        except requests.RequestException as e:
            partial.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise DownloadError(f"Failed to write {dest}: {e}") from e

        if checksum and digest.lower() != checksum.lower():
            partial.unlink(missing_ok=True)
            raise ChecksumError(f"SHA256 of {url} is {digest}, expected {checksum}")

        partial.replace(dest)
        self.log.info(f"Downloaded {url} -> {dest}")
        return dest

    def _stream(
        self, response: requests.Response, target: Path, label: str, show_progress: bool
    ) -> str:
        """Write the response body to target, returning its SHA256 hex digest."""
        sha256 = hashlib.sha256()
        total = int(response.headers.get("content-length", 0)) or None

        with open(target, "wb") as out, tqdm(
            total=total,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            desc=label,
            disable=not show_progress,
        ) as progress:
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if not chunk:
                    continue
                out.write(chunk)
                sha256.update(chunk)
                progress.update(len(chunk))

        return sha256.hexdigest()

    def extract_archive(self, archive: Path, dest: Path) -> Path:
        """Unpack a tar (gz/bz2/xz) or zip archive into dest.

        Tar members are extracted with the `data` filter, so absolute paths
        and links pointing outside dest are rejected.

        Raises:
            ExtractionError: If the archive is missing, unsupported or corrupt
        """
        archive = Path(archive)
        dest = Path(dest)

        if not archive.is_file():
            raise ExtractionError(f"Archive not found: {archive}")

        unpack: Callable[[Path, Path], None]
        if archive.suffix == ".zip":
            unpack = _unpack_zip
        elif archive.name.endswith(TAR_SUFFIXES):
            unpack = _unpack_tar
        else:
            raise ExtractionError(f"Unsupported archive format: {archive.name}")

        self.log.info(f"Unpacking {archive.name} into {dest}")
        try:
            dest.mkdir(parents=True, exist_ok=True)
            unpack(archive, dest)
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise ExtractionError(f"Cannot unpack {archive}: {e}") from e
        return dest

    def download_and_extract(
        self,
        url: str,
        cache_dir: Path,
        extract_dir: Path,
        checksum: Optional[str] = None,
        show_progress: bool = True,
    ) -> Path:
        """Unpack the archive at url, downloading it unless cache_dir has it.

        Returns:
            extract_dir
        """
        cached = Path(cache_dir) / archive_name(url)
        if cached.is_file():
            self.log.info(f"Reusing downloaded {cached.name}")
        else:
            self.download(url, cached, checksum, show_progress)
        return self.extract_archive(cached, extract_dir)
