"""Lookup of the previous dated backup of a directory."""

import os
import re
import logging
from pathlib import Path
from typing import List, Optional

from .errors import AmbiguousCandidatesError, DestinationUnreadableError
from .models import DestinationCandidate

DATED_NAME_PATTERN = re.compile(r"^(.+)_[0-9]{4}-[0-9]{2}-[0-9]{2}-[0-9]{2}h[0-9]{2}$")


class CandidateResolver:
    """Finds at most one previous dated backup in a destination directory."""

    def __init__(self, pattern=DATED_NAME_PATTERN):
        self.pattern = pattern
        self.logger = logging.getLogger(__name__)

    def find_candidates(self, base_name: str, destination_dir) -> List[DestinationCandidate]:
        """List every entry of ``destination_dir`` that is a dated backup of ``base_name``.

        Only real directories qualify; files and symlinks with a matching
        name are ignored.

        Args:
            base_name: Name of the source directory.
            destination_dir: Directory to scan (not recursively).

        Returns:
            Matching candidates sorted by path.

        Raises:
            DestinationUnreadableError: If the directory cannot be listed.
        """
        candidates = []
        try:
            with os.scandir(destination_dir) as entries:
                for entry in entries:
                    match = self.pattern.match(entry.name)
                    if not match or match.group(1) != base_name:
                        continue
                    if not entry.is_dir(follow_symlinks=False):
                        self.logger.debug(f"Ignoring {entry.path!r}: not a directory")
                        continue
                    candidates.append(DestinationCandidate(path=Path(entry.path), base_name=base_name))
        except OSError as e:
            raise DestinationUnreadableError(
                f"failed to look for candidates: failed to read as a directory {str(destination_dir)!r}"
            ) from e

        candidates.sort(key=lambda candidate: candidate.path)
        return candidates

    def resolve(self, base_name: str, destination_dir) -> Optional[DestinationCandidate]:
        """Return the single previous backup of ``base_name``, if any.

        Raises:
            AmbiguousCandidatesError: If more than one candidate matches.
            DestinationUnreadableError: If the directory cannot be listed.
        """
        candidates = self.find_candidates(base_name, destination_dir)
        if len(candidates) > 1:
            raise AmbiguousCandidatesError([candidate.path for candidate in candidates])
        if candidates:
            self.logger.debug(f"Found candidate {str(candidates[0].path)!r}")
            return candidates[0]
        return None
