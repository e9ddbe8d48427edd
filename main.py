import asyncio
import argparse
import json
import logging
import yaml
from core.catalog import load_catalog
from core.stacks import Stacks
from fetch.browser_client import PlaywrightExecutionContext, open_page
from rules.rules_loader import load_server_signatures

def main():
    parser = argparse.ArgumentParser(description="Detect the JS libraries and server software behind a web page")
    parser.add_argument("url", nargs="?", help="Target URL (e.g., https://example.com)")
    parser.add_argument("--catalog", type=str, help="Path or URL of the library signature catalog script (js-library-detector libraries.js)")
    parser.add_argument("--servers-file", type=str, help="YAML server signature table to use instead of the bundled one")
    parser.add_argument("--list-servers", action="store_true", help="List the server signatures and exit")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: INFO)")
    parser.add_argument("--headers-file", type=str, help="Path to JSON file containing additional HTTP headers sent while loading the page")
    parser.add_argument("--timeout-ms", type=int, default=30000, help="Navigation timeout in milliseconds (default: 30000)")
    parser.add_argument("--wait-until", type=str, default="load", choices=["load", "domcontentloaded", "networkidle", "commit"], help="Navigation event to wait for before probing (default: load)")
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    try:
        server_signatures = load_server_signatures(args.servers_file)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Could not load server signatures: {e}")
        return

    if args.list_servers:
        print("Server signatures (checked in order):")
        for signature in server_signatures:
            matchers = ", ".join(f"{h}: {p or '<present>'}" for h, p in signature.headers.items())
            print(f"  - {signature.id} ({signature.name}) [{matchers}]")
        return

    if not args.url:
        parser.error("URL is required unless using --list-servers")
    if not args.catalog:
        parser.error("--catalog is required")

    # Load custom headers from JSON file if provided
    custom_headers = {}
    if args.headers_file:
        try:
            with open(args.headers_file, 'r') as f:
                custom_headers = json.load(f)
                if not isinstance(custom_headers, dict):
                    logger.error("Headers file must contain a JSON object (dictionary)")
                    return
                logger.info(f"Loaded {len(custom_headers)} custom headers from {args.headers_file}")
        except FileNotFoundError:
            logger.error(f"Headers file not found: {args.headers_file}")
            return
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in headers file: {e}")
            return

    async def run():
        try:
            catalog = await load_catalog(args.catalog)
        except Exception as e:
            logger.error(f"Could not load signature catalog {args.catalog}: {e}")
            return

        stacks = Stacks(catalog, server_signatures)

        async with open_page(headless=not args.headful, extra_headers=custom_headers) as (page, recorder):
            logger.info(f"Loading {args.url}...")
            try:
                await page.goto(args.url, wait_until=args.wait_until, timeout=args.timeout_ms)
            except Exception as e:
                logger.warning(f"Navigation to {args.url} did not complete cleanly: {e}")

            entries = await stacks.get_artifact(PlaywrightExecutionContext(page), recorder.entries)
            await recorder.detach()

        logger.info(f"Detected {len(entries)} stacks")
        print(json.dumps([entry.to_dict() for entry in entries], indent=2))

    asyncio.run(run())

if __name__ == "__main__":
    main()
