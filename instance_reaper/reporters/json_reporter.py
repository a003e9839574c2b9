"""
JSON Reporter Module
====================

Exports the result of a reap run to JSON for scripting and auditing.

Output Structure
----------------
::

    {
      "metadata": {
        "service_name": "p-mysql",
        "reap": true,
        "recursive": false,
        "succeeded": false,
        "expired_count": 2,
        "deleted_count": 1,
        "error_count": 1,
        "start_time": "2024-01-15T10:30:00+00:00",
        "end_time": "2024-01-15T10:30:04+00:00"
      },
      "expired_instances": [
        {"id": "...", "name": "...", "created_at": "...", "deleted": true}
      ],
      "errors": [{"stage": "sink", "message": "..."}]
    }

Classes
-------
JSONReporter
    Main reporter class for JSON export.

Example
-------
>>> reporter = JSONReporter(output_path="reap.json")
>>> filepath = reporter.report(result)
>>>
>>> # Or get as string
>>> json_str = reporter.to_string(result)

See Also
--------
CLIReporter : For terminal display.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from instance_reaper.reaper.result import ReapResult

# Module logger
logger = logging.getLogger(__name__)


class JSONReporter:
    """
    Reporter for exporting reap results to JSON format.

    Parameters
    ----------
    output_path : str, optional
        Path for the output file. If not provided, generates a
        timestamped filename in the current directory.
    indent : int, default=2
        JSON indentation level. Set to None for compact output.

    Attributes
    ----------
    output_path : str or None
        The configured output path.
    indent : int or None
        JSON indentation level.
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        indent: Optional[int] = 2,
    ) -> None:
        """Initialize the JSON reporter with optional output path and indentation."""
        self.output_path = output_path
        self.indent = indent
        logger.debug(f"Initialized JSONReporter (output_path={output_path})")

    def _get_output_path(self, service_name: str) -> Path:
        """
        Get the output file path.

        Parameters
        ----------
        service_name : str
            Service of the run, used in generated filenames.

        Returns
        -------
        Path
            The configured path, or ``reap_<service>_<timestamp>.json``.
        """
        if self.output_path:
            return Path(self.output_path)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_name = "".join(c if c.isalnum() or c in "-_" else "_" for c in service_name)
        return Path(f"reap_{safe_name}_{timestamp}.json")

    def build(self, result: ReapResult) -> Dict[str, Any]:
        """
        Build the JSON document for a result.

        Parameters
        ----------
        result : ReapResult
            Result of the run.

        Returns
        -------
        dict
            Document with ``metadata``, ``expired_instances`` and ``errors``.
        """
        deleted = set(result.deleted)
        return {
            "metadata": {
                "service_name": result.service_name,
                "reap": result.reap,
                "recursive": result.recursive,
                "succeeded": result.succeeded,
                "expired_count": len(result.expired),
                "deleted_count": len(result.deleted),
                "error_count": len(result.errors),
                "start_time": result.start_time.isoformat(),
                "end_time": result.end_time.isoformat() if result.end_time else None,
            },
            "expired_instances": [
                {**instance.to_dict(), "deleted": instance.id in deleted}
                for instance in result.expired
            ],
            "errors": [error.to_dict() for error in result.errors],
        }

    def to_string(self, result: ReapResult) -> str:
        """Serialize a result to a JSON string."""
        return json.dumps(self.build(result), indent=self.indent)

    def report(self, result: ReapResult) -> str:
        """
        Write a result to the output file.

        Returns
        -------
        str
            Path of the written file.
        """
        path = self._get_output_path(result.service_name)
        path.write_text(self.to_string(result) + "\n", encoding="utf-8")
        logger.info(f"Wrote JSON report to {path}")
        return str(path)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"JSONReporter(output_path={self.output_path!r})"
