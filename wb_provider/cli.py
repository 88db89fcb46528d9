"""
WB Provider CLI - query the metadata server from the command line
"""
import argparse
import asyncio
import json
import sys
from dataclasses import asdict

from wb_provider.provider.client import RemoteClient
from wb_provider.provider.service import EnrichmentService
from wb_provider.provider.types import MediaQuery, ServerAddress
from wb_provider.utils.config import load_config
from wb_provider.utils.logger import logger, resolve_log_level, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="WB Provider: fetch metadata and posters from the metadata server"
    )
    parser.add_argument("--server-ip", type=str, default=None, help="Metadata server ip (default: config.json)")
    parser.add_argument("--server-port", type=int, default=None, help="Metadata server port (default: config.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")

    sub = parser.add_subparsers(dest="command", required=True)

    p_meta = sub.add_parser("metadata", help="Look up metadata for a media file")
    p_meta.add_argument("path", type=str, help="Media file path (the base name is the lookup key)")
    p_meta.add_argument("--name", type=str, default=None, help="Display name kept when nothing is found")
    p_meta.add_argument("--year", type=int, default=None, help="Known production year")

    p_search = sub.add_parser("search", help="Search the metadata server by name")
    p_search.add_argument("name", type=str)

    p_image = sub.add_parser("image", help="Download a poster (http(s) url or \\\\share path)")
    p_image.add_argument("url", type=str)
    p_image.add_argument("-o", "--output", type=str, required=True, help="Output file")

    return parser


async def run(args: argparse.Namespace) -> int:
    cfg = load_config()
    set_log_level(resolve_log_level(cfg.log_level))
    if args.verbose:
        set_log_level("DEBUG")

    server = ServerAddress(
        host=args.server_ip or cfg.server_ip,
        port=args.server_port or cfg.server_port,
    )

    async with RemoteClient(timeout=cfg.request_timeout_sec) as client:
        service = EnrichmentService(server, client)

        if args.command == "metadata":
            query = MediaQuery(display_name=args.name or args.path, file_path=args.path, known_year=args.year)
            result = await service.enrich(query)
            print(json.dumps(asdict(result), ensure_ascii=False, indent=2, default=str))
            return 0

        if args.command == "search":
            results = await service.search(args.name)
            print(json.dumps([asdict(r) for r in results], ensure_ascii=False, indent=2))
            return 0

        response = await service.get_image_response(args.url)
        if not response.ok:
            logger.error(f"Image not available ({response.reason}): {args.url}")
            return 1
        with open(args.output, "wb") as f:
            f.write(response.content)
        logger.info(f"Saved {len(response.content)} bytes ({response.content_type}) to {args.output}")
        return 0


def main():
    args = build_parser().parse_args()

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("\nInterrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.critical(f"Unexpected error: {e}")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
