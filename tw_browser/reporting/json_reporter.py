"""JSON report generator for discovery results.

Generates structured JSON reports from discovered server infos.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..protocol.models import ServerInfo


class JsonReporter:
    """Generates JSON reports from discovered servers."""

    def generate(
        self,
        infos: list[ServerInfo],
        duration_ms: int = 0,
        master_servers: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report from server infos.

        Args:
            infos: Discovered server infos.
            duration_ms: Discovery duration in milliseconds.
            master_servers: Master servers that were queried.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        infos = sorted(infos, key=lambda info: info.address)

        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "summary": {
                "servers": len(infos),
                "players": sum(info.num_players for info in infos),
                "clients": sum(info.num_clients for info in infos),
                "duration_ms": duration_ms,
            },
            "master_servers": master_servers or [],
            "servers": [info.to_dict() for info in infos],
        }

        return report

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        """Convert report to JSON string."""
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def generate_flow_output(
        self,
        command: str,
        data: Any,
        message: str,
        success: bool = True,
    ) -> dict[str, Any]:
        """Wrap command output in the CLI output envelope.

        {
            "success": bool,
            "command": "list",
            "data": { ... },
            "message": str
        }
        """
        return {
            "success": success,
            "command": command,
            "data": data,
            "message": message,
        }
