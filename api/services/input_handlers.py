"""
Dataset sources: uploaded files, remote URLs and local paths
"""
import shutil
from pathlib import Path
from typing import BinaryIO, Union
from urllib.parse import urlparse
import httpx
import logging

from src.stage1_bundler import DatasetNotFoundError
from src.stage1_bundler.config import SUPPORTED_EXTENSIONS

from ..config import settings

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = settings.MAX_FILE_SIZE_MB * 1024 * 1024
DOWNLOAD_TIMEOUT = 300.0
DEFAULT_DOWNLOAD_NAME = "dataset.csv"


def check_extension(filename: str) -> str:
    """
    Raises:
        ValueError: The dataset type cannot be bundled
    """
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ValueError(
            f"Unsupported file type: {suffix or '(none)'}. "
            f"Allowed: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )
    return suffix


def _too_large(size: int) -> ValueError:
    return ValueError(f"File too large: {size / 1024 / 1024:.1f}MB (max: {settings.MAX_FILE_SIZE_MB}MB)")


def save_upload(target_dir: Union[str, Path], stream: BinaryIO, filename: str) -> Path:
    """Copy an uploaded dataset into target_dir, keeping only its base name"""
    check_extension(filename)
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target_path = target_dir / Path(filename).name

    with open(target_path, "wb") as f:
        shutil.copyfileobj(stream, f)

    size = target_path.stat().st_size
    if size > MAX_FILE_SIZE:
        target_path.unlink()
        raise _too_large(size)

    logger.info(f"Saved uploaded dataset: {target_path} ({size / 1024:.1f}KB)")
    return target_path


def download_dataset(url: str, target_dir: Union[str, Path]) -> Path:
    """
    Stream a remote dataset into target_dir.

    A URL path without an extension is saved as CSV.

    Raises:
        ValueError: Unsupported type or over the size limit
        httpx.HTTPError: The download failed
    """
    name = Path(urlparse(url).path).name or DEFAULT_DOWNLOAD_NAME
    if not Path(name).suffix:
        name = f"{name}.csv"
    check_extension(name)

    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target_path = target_dir / name

    logger.info(f"Fetching dataset from: {url}")
    received = 0
    with httpx.Client(timeout=DOWNLOAD_TIMEOUT, follow_redirects=True) as client:
        with client.stream("GET", url) as response:
            response.raise_for_status()

            declared = response.headers.get("content-length")
            if declared and int(declared) > MAX_FILE_SIZE:
                raise _too_large(int(declared))

            with open(target_path, "wb") as f:
                for chunk in response.iter_bytes(chunk_size=8192):
                    received += len(chunk)
                    if received > MAX_FILE_SIZE:
                        break
                    f.write(chunk)

    if received > MAX_FILE_SIZE:
        target_path.unlink()
        raise _too_large(received)

    logger.info(f"✅ Downloaded dataset: {target_path} ({received / 1024:.1f}KB)")
    return target_path


def resolve_data_source(source: str, workspace_dir: Union[str, Path]) -> Path:
    """
    Local path for a pipeline's data source.

    http(s) URLs are downloaded into <workspace>/input; anything else is a
    local file that must exist.
    """
    if source.startswith(("http://", "https://")):
        return download_dataset(source, Path(workspace_dir) / "input")

    path = Path(source).expanduser()
    if not path.is_file():
        raise DatasetNotFoundError(f"Dataset not found: {source}")
    return path
