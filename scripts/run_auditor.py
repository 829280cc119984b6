#!/usr/bin/env python3
"""Run the AR auditor.

Two modes:
- ``serve``: expose the auditor session over the FastAPI operator API.
- ``audit``: one-shot accessibility audit of an image file, printed as JSON,
  optionally followed by a remediation render of one issue.
"""

import asyncio
import json
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from arauditor.ai.openai_client import get_inference_client
from arauditor.ai.prompt import build_remediation_instruction
from arauditor.core.config import config
from arauditor.utils.file_utils import get_timestamp, save_image_bytes
from arauditor.vision.camera import load_frame_from_file
from arauditor.vision.debug import save_debug_overlay


async def audit_image(image_path: str, remediate: int | None, output_dir: str) -> int:
    """Audit a single image file and optionally render a fix for one issue."""
    frame = load_frame_from_file(image_path)
    client = get_inference_client()

    result = await client.analyze_image(frame.data)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    save_debug_overlay(frame, result, Path(image_path).stem)

    if remediate is None:
        return 0

    if not 0 <= remediate < len(result.issues):
        logger.error(f"No issue at index {remediate} ({len(result.issues)} found)")
        return 1

    instruction = build_remediation_instruction(result.issues[remediate])
    edited = await client.edit_image(frame.data, instruction)
    if edited is None:
        logger.warning("Remediation render returned no image")
        return 1

    out_path = str(Path(output_dir) / f"{Path(image_path).stem}_remediated_{get_timestamp()}.png")
    save_image_bytes(edited, out_path)
    logger.info(f"Remediation saved to {out_path}")
    return 0


def main():
    """Main function."""
    import argparse

    parser = argparse.ArgumentParser(description="Walk In My Shoes AR accessibility auditor")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the operator API")
    serve.add_argument("--host", default=config.api_host)
    serve.add_argument("--port", type=int, default=config.api_port)

    audit = sub.add_parser("audit", help="Audit a single image file")
    audit.add_argument("image_path", help="Path to the image to audit")
    audit.add_argument("--remediate", "-r", type=int, default=None,
                       help="Render a remediation for the issue at this index")
    audit.add_argument("--output-dir", "-o", default="remediations",
                       help="Output directory for remediation renders")

    args = parser.parse_args()
    config.validate_config()

    if args.command == "serve":
        import uvicorn

        from arauditor.api import create_app

        uvicorn.run(create_app(), host=args.host, port=args.port)
        return

    if not Path(args.image_path).exists():
        logger.error(f"Image not found: {args.image_path}")
        sys.exit(1)

    sys.exit(asyncio.run(audit_image(args.image_path, args.remediate, args.output_dir)))


if __name__ == "__main__":
    main()
