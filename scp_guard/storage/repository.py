"""
File-backed report sources and policy stores.

Handles reading scanner reports from disk and writing policy documents.
"""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Union

from scp_guard.core.errors import InputUnavailableError, ParseError, PersistenceError
from scp_guard.core.policy import PolicyDocument

logger = logging.getLogger(__name__)

DEFAULT_POLICY_FILE = "testSCP.json"
POLICY_FILE_MODE = 0o644


def directory_exists(directory: Union[str, Path]) -> bool:
    """Return True if ``directory`` exists and is a directory."""
    return Path(directory).is_dir()


class FileReportSource:
    """Reads a scanner report from the local filesystem."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> bytes:
        """Read the raw report bytes.

        Raises:
            InputUnavailableError: If the file cannot be read for any reason
        """
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise InputUnavailableError(str(self.path)) from e
        logger.debug("Loaded %d bytes from %s", len(data), self.path)
        return data


class FilePolicyStore:
    """Writes policy documents as indented JSON files.

    Documents are written to a temporary file next to the destination and
    moved into place, so a failed save never leaves a partial file.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_POLICY_FILE):
        self.path = Path(path)

    def save(self, document: PolicyDocument) -> None:
        """Serialize and store a policy document.

        Raises:
            PersistenceError: If serialization fails, the destination
                directory is missing, or the write fails
        """
        try:
            payload = json.dumps(document.to_dict(), indent=1)
        except (TypeError, ValueError, AttributeError) as e:
            raise PersistenceError(f"cannot serialize policy document: {e}") from e

        directory = self.path.parent
        if not directory_exists(directory):
            raise PersistenceError(f"output directory does not exist: {directory}")

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False
            ) as f:
                tmp_name = f.name
                f.write(payload)
            os.chmod(tmp_name, self._file_mode())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"cannot write policy document to {self.path}: {e}") from e

        logger.info(
            "Wrote %s policy with %d actions to %s",
            document.effect.value, len(document.actions), self.path
        )

    def _file_mode(self) -> int:
        """Keep the mode of an existing policy, else 0644 minus the umask."""
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return POLICY_FILE_MODE & ~umask

    def load(self) -> PolicyDocument:
        """Read a previously stored policy document.

        Raises:
            InputUnavailableError: If the file cannot be read
            ParseError: If the file is not a valid policy document
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise InputUnavailableError(str(self.path)) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid policy document JSON in {self.path}: {e}") from e

        return PolicyDocument.from_dict(data)
