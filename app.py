#!/usr/bin/env python3
"""
Run script for the loan inventory API
"""

import argparse
import os
import sys
from dotenv import load_dotenv

# Load environment variables from .env file before the app reads them
load_dotenv()

from loan_inventory import create_app  # noqa: E402
from loan_inventory.build import build_database  # noqa: E402
from loan_inventory.logger import get_logger  # noqa: E402

logger = get_logger("loan_inventory.run")


def parse_arguments():
    parser = argparse.ArgumentParser(description='Equipment loan inventory API')
    parser.add_argument('--build-only', action='store_true',
                        help='Create tables and critical data, then exit without starting the server')
    parser.add_argument('--no-debug-data', action='store_false', dest='enable_debug_data',
                        help='Do not insert the sample employees and equipment')
    return parser.parse_args()


def _env_flag(name, default='False'):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


if __name__ == '__main__':
    args = parse_arguments()
    app = create_app()

    # Critical data is ALWAYS checked and inserted regardless of flags
    build_database(
        enable_debug_data=args.enable_debug_data and not args.build_only,
        app=app,
    )

    if args.build_only:
        logger.info("Build completed. Exiting without starting web server.")
        sys.exit(0)

    debug_mode = _env_flag('FLASK_DEBUG')
    use_reloader = _env_flag('USE_RELOADER')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
