"""
Result Writer for t0-monitor

Writes each TimeframeResult to <output_dir>/timeframe_<index>.json.

Files are written atomically (write to temp, rename) so a reader never sees
a partial timeframe.

Usage:
    writer = ResultWriter('/tmp/t0-monitor')
    writer.write(timeframe_result)
"""

import os
import tempfile
import logging
from pathlib import Path
from typing import Optional

from ..interfaces.monitor_result import ClusterResult, TimeframeResult
from .sink import AggregationSink

logger = logging.getLogger(__name__)


class ResultWriter(AggregationSink):
    """
    Writes TimeframeResult JSON files.

    Per-cluster results are written together with their timeframe, so
    `append` only counts them.
    """

    DEFAULT_DIR = "/tmp/t0-monitor"

    def __init__(self, output_dir: Optional[str] = None):
        """
        Initialize result writer.

        Args:
            output_dir: Directory for timeframe files (default: /tmp/t0-monitor)
        """
        self.output_dir = Path(output_dir or self.DEFAULT_DIR)
        self.write_count = 0
        self.clusters_seen = 0

        self.output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"ResultWriter initialized: {self.output_dir}")

    def path_for(self, timeframe: int) -> Path:
        return self.output_dir / f"timeframe_{timeframe:06d}.json"

    def append(self, result: ClusterResult) -> None:
        self.clusters_seen += 1

    def end_timeframe(self, result: TimeframeResult) -> None:
        self.write(result)

    def write(self, result: TimeframeResult) -> bool:
        """
        Write a timeframe result.

        Uses atomic write (temp file + rename) to prevent partial reads.

        Args:
            result: TimeframeResult to write

        Returns:
            True if successful, False on error
        """
        target = self.path_for(result.timeframe)
        try:
            json_data = result.to_json()

            # Temp file in same directory (required for atomic rename)
            fd, temp_path = tempfile.mkstemp(
                dir=self.output_dir,
                prefix='.timeframe_',
                suffix='.tmp'
            )

            try:
                with os.fdopen(fd, 'w') as f:
                    f.write(json_data)
                os.replace(temp_path, target)
            except OSError:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise

            self.write_count += 1
            logger.debug(
                f"Wrote TF {result.timeframe}: {result.n_clusters} clusters, "
                f"{result.n_matches} matches -> {target}"
            )
            return True

        except OSError as e:
            logger.error(f"Failed to write {target}: {e}")
            return False

    def read(self, timeframe: int) -> Optional[TimeframeResult]:
        """
        Read a previously written timeframe result.

        Returns:
            TimeframeResult or None if the file doesn't exist or is invalid
        """
        path = self.path_for(timeframe)
        if not path.exists():
            return None

        try:
            with open(path, 'r') as f:
                return TimeframeResult.from_json(f.read())
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return None
