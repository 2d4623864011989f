"""
Walk an AVEVA Data Hub namespace through the Data Views lifecycle.

The sample will:
- Create two SDS types and two tank streams and fill them with an hour of data
- Create a Data View and configure it step by step (query, field sets, grouping,
  identifying fields, consolidation, units of measure, summaries)
- Print interpolated and stored results after every change
- Show how the Accept-Verbosity header changes results that contain nulls
- Delete everything it created, even when a step failed

Usage:
  python dataview_sample.py --config appsettings.json

Settings come from appsettings.json (TenantId, NamespaceId, Resource, ClientId,
ClientSecret, ApiVersion); missing keys fall back to ADH_* environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

from adh_integration.config import AdhConfig
from orchestrator.orchestrator import DataViewWorkflow
from shared.exceptions import ConfigurationError
from shared.logger import LOG_FORMATS, setup_logging


def load_config(path: str) -> AdhConfig:
    """Read the settings file when it exists, otherwise rely on the environment."""
    if Path(path).is_file():
        return AdhConfig.from_json(path)
    return AdhConfig()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run the ADH Data Views sample end to end")
    parser.add_argument(
        "--config",
        default=os.getenv("ADH_SETTINGS_FILE", "appsettings.json"),
        help="Path to appsettings.json (default: env ADH_SETTINGS_FILE or appsettings.json)",
    )
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"), help="Log level (default: INFO)")
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=os.getenv("LOG_FORMAT", "json"),
        help="Log output on stderr (default: json)",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Report success or failure as a boolean instead of raising the first error",
    )
    args = parser.parse_args(argv)

    try:
        logger = setup_logging(args.log_level, args.log_format)
    except ConfigurationError as e:
        parser.error(str(e))

    try:
        config = load_config(args.config)
        workflow = DataViewWorkflow(config)
        succeeded = asyncio.run(workflow.run(test=args.test))
    except KeyboardInterrupt:
        logger.warning("Sample interrupted")
        return 130
    except Exception as e:
        logger.error("Sample failed", error=str(e), error_type=type(e).__name__, exc_info=True)
        print(f"Sample failed: {e}", file=sys.stderr)
        return 1

    if args.test:
        print(succeeded)
    return 0 if succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
