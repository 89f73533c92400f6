"""
Persistence of run reports and installer provenance.
"""

import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional
import hashlib

from ..models.installation import SetupReport


class ArtifactManager:
    """Stores run summaries, step logs and installer checksums."""

    def __init__(self, base_path: Path, run_id: Optional[str] = None):
        """
        Initialize artifact manager.

        Args:
            base_path: Base directory for storing artifacts
            run_id: Optional run ID, defaults to a UTC timestamp
        """
        self.logger = logging.getLogger(__name__)
        self.base_path = Path(base_path)
        self.run_id = run_id or datetime.utcnow().strftime("%Y%m%d_%H%M%S")
        self.run_base_path = self.base_path / "runs" / self.run_id
        self.logs_dir = self.run_base_path / "logs"

    def save_json(self, filename: str, data: Dict[str, Any]) -> Path:
        """
        Save JSON data to file.

        Args:
            filename: JSON filename
            data: Data to save

        Returns:
            Path to saved file
        """
        self.run_base_path.mkdir(parents=True, exist_ok=True)

        json_path = self.run_base_path / filename

        if 'timestamp' not in data:
            data['timestamp'] = datetime.utcnow().isoformat()

        with open(json_path, 'w') as f:
            json.dump(data, f, indent=2, default=str)

        self.logger.info(f"Saved JSON to {json_path}")
        return json_path

    def save_log(self, step: str, log_content: str) -> Path:
        """Save captured command output of a step."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        log_path = self.logs_dir / f"{step.replace(':', '_')}.log"
        log_path.write_text(log_content)
        return log_path

    def record_installer(self, script_path: Path) -> Path:
        """Save the SHA-256 of the downloaded installer script."""
        checksum = hashlib.sha256(Path(script_path).read_bytes()).hexdigest()
        self.run_base_path.mkdir(parents=True, exist_ok=True)
        checksum_path = self.run_base_path / f"{Path(script_path).name}.sha256"
        checksum_path.write_text(f"{checksum}  {Path(script_path).name}\n")
        self.logger.info(f"Installer checksum: {checksum}")
        return checksum_path

    def save_report(self, report: SetupReport) -> Path:
        """Write the summary and the output of every step that captured any."""
        for step in report.steps:
            if step.output:
                report.artifacts[f"log:{step.step}"] = str(self.save_log(step.step, step.output))

        summary_path = self.save_json("summary.json", report.model_dump(mode="json"))
        report.artifacts["summary"] = str(summary_path)
        return summary_path
