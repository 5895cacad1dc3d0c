"""Artifact store reader for scanner outputs.

Loads named JSON files from the artifact directory and classifies each as
absent, present-but-invalid, or parsed. Reading never raises: every I/O
and decode failure is captured on the returned ArtifactReadResult.

Provides:
- ArtifactFile: Fixed file names of the scanner artifacts
- ArtifactReadResult: Immutable outcome of reading one artifact
- ArtifactStore: Reads artifacts (one at a time or concurrently)
- ensure_directory: Best-effort creation of the artifact directory
"""

import asyncio
import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

from compliance_gate.core.models import ArtifactErrorKind

logger = structlog.get_logger()


class ArtifactFile(str, Enum):
    """Scanner artifacts expected in the artifact directory."""

    GITLEAKS = "gitleaks.json"
    TRIVY_FS = "trivy-fs.json"
    TRIVY_IMAGE = "trivy-image.json"
    DOCKLE = "dockle.json"
    SBOM = "sbom.json"


@dataclass(frozen=True)
class ArtifactReadResult:
    """Outcome of reading one artifact.

    ``parsed`` implies ``found``; ``data`` is only meaningful when ``parsed``
    (a file containing JSON ``null`` is parsed with ``data=None``).
    """

    name: str
    path: Path
    found: bool = False
    parsed: bool = False
    data: Any = None
    error: str | None = None
    error_kind: ArtifactErrorKind | None = None

    @property
    def usable(self) -> bool:
        return self.found and self.parsed


def _reject_constant(value: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"Unexpected token {value}")


def ensure_directory(path: Path) -> bool:
    """Create the artifact directory if missing.

    Failure is logged and reported, never raised: a missing directory
    simply surfaces later as missing artifacts and a failed report write.

    Args:
        path: Directory to create (parents included)

    Returns:
        True if the directory exists afterwards
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logger.warning("directory_create_failed", path=str(path), error=str(e))
        return False


class ArtifactStore:
    """Reads scanner artifacts from a single directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.log = logger.bind(artifact_dir=str(self.directory))

    def read(self, name: str) -> ArtifactReadResult:
        """Read and parse one artifact.

        Args:
            name: File name inside the artifact directory

        Returns:
            ArtifactReadResult; never raises for I/O or parse failures
        """
        path = self.directory / name

        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.log.info("artifact_missing", artifact=name)
            return ArtifactReadResult(
                name=name,
                path=path,
                error="File not found",
                error_kind=ArtifactErrorKind.NOT_FOUND,
            )
        except (OSError, UnicodeDecodeError) as e:
            # The file exists but could not be read (permissions, directory, encoding)
            self.log.warning("artifact_read_failed", artifact=name, error=str(e))
            return ArtifactReadResult(
                name=name,
                path=path,
                found=True,
                error=f"Read error: {e}",
                error_kind=ArtifactErrorKind.INVALID_ENCODING,
            )

        try:
            data = json.loads(content, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            # Nesting deeper than the parser can follow counts as malformed
            self.log.warning("artifact_invalid_json", artifact=name, error=str(e))
            return ArtifactReadResult(
                name=name,
                path=path,
                found=True,
                error=f"Invalid JSON: {e}",
                error_kind=ArtifactErrorKind.INVALID_ENCODING,
            )

        self.log.debug("artifact_read", artifact=name, size=len(content))
        return ArtifactReadResult(name=name, path=path, found=True, parsed=True, data=data)

    async def read_all(self, names: list[str]) -> dict[str, ArtifactReadResult]:
        """Read several artifacts concurrently.

        Reads are independent, so they run in worker threads; the call only
        returns once every read has completed.

        Args:
            names: Artifact file names

        Returns:
            Read results keyed by file name, in the order requested
        """
        results = await asyncio.gather(
            *(asyncio.to_thread(self.read, name) for name in names)
        )
        return dict(zip(names, results))
